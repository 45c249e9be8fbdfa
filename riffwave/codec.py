"""
Endianness-aware integer codec for RIFF header fields.
Byte order is chosen by the caller, never by the host.
"""

import struct
from enum import Enum
from typing import BinaryIO

from riffwave.errors import TruncatedStream


class Endianness(Enum):
    """Byte order of multi-byte header fields."""
    LITTLE = "<"   # RIFF
    BIG = ">"      # RIFX

    @property
    def struct_prefix(self) -> str:
        return self.value


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly `size` bytes or raise TruncatedStream."""
    data = stream.read(size)
    if data is None:
        data = b""
    if len(data) != size:
        raise TruncatedStream(size, len(data))
    return data


def _read_int(stream: BinaryIO, fmt: str, endianness: Endianness) -> int:
    code = endianness.struct_prefix + fmt
    return struct.unpack(code, read_exact(stream, struct.calcsize(code)))[0]


def _write_int(stream: BinaryIO, fmt: str, value: int, endianness: Endianness) -> None:
    stream.write(struct.pack(endianness.struct_prefix + fmt, value))


def read_uint16(stream: BinaryIO, endianness: Endianness) -> int:
    return _read_int(stream, "H", endianness)


def read_uint32(stream: BinaryIO, endianness: Endianness) -> int:
    return _read_int(stream, "I", endianness)


def write_uint16(stream: BinaryIO, value: int, endianness: Endianness) -> None:
    """Write a 16-bit unsigned integer. Raises struct.error when out of range."""
    _write_int(stream, "H", value, endianness)


def write_uint32(stream: BinaryIO, value: int, endianness: Endianness) -> None:
    """Write a 32-bit unsigned integer. Raises struct.error when out of range."""
    _write_int(stream, "I", value, endianness)
