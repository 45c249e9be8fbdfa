"""
WAV file format utilities.
Parses RIFF/RIFX PCM headers and builds them for writing and streaming.
"""

import io
import logging
import struct
from dataclasses import dataclass, replace
from enum import Enum
from typing import BinaryIO, NamedTuple, Optional

from riffwave.codec import Endianness, read_exact, read_uint16, read_uint32
from riffwave.config import HeaderlessDefaults, config
from riffwave.errors import MalformedHeader, UnsupportedFormat


logger = logging.getLogger(__name__)

PCM_FORMAT = 1
PCM_FMT_SIZE = 16
HEADER_SIZE = 44  # RIFF(12) + fmt header(8) + fmt payload(16) + data header(8)
MAX_CHUNK_SIZE = 0xFFFFFFFF


class HeaderKind(Enum):
    """Container tag found at offset 0."""
    RIFF = b"RIFF"   # little-endian fields
    RIFX = b"RIFX"   # big-endian fields
    NONE = b""       # raw headerless PCM

    @property
    def endianness(self) -> Endianness:
        return Endianness.BIG if self is HeaderKind.RIFX else Endianness.LITTLE

    @classmethod
    def for_endianness(cls, endianness: Endianness) -> "HeaderKind":
        return cls.RIFX if endianness is Endianness.BIG else cls.RIFF


@dataclass
class StreamParameters:
    """Audio parameters of an open stream."""
    channels: int = 1
    sample_width: int = 1   # bytes per sample per channel
    sample_rate: int = 8000
    frame_count: int = 0
    endianness: Endianness = Endianness.LITTLE

    @classmethod
    def from_defaults(cls, defaults: HeaderlessDefaults) -> "StreamParameters":
        return cls(
            channels=defaults.channels,
            sample_width=defaults.sample_width,
            sample_rate=defaults.sample_rate,
        )

    @property
    def frame_size(self) -> int:
        return self.channels * self.sample_width

    @property
    def bits_per_sample(self) -> int:
        return self.sample_width * 8

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.frame_size

    @property
    def block_align(self) -> int:
        return self.frame_size

    def copy(self) -> "StreamParameters":
        return replace(self)


class ParsedHeader(NamedTuple):
    """Result of parse_header."""
    kind: HeaderKind
    params: StreamParameters
    data_start: int
    data_size: int


def is_seekable(stream: BinaryIO) -> bool:
    try:
        return stream.seekable()
    except (AttributeError, ValueError):
        return False


def _read_tag(stream: BinaryIO, seekable: bool) -> bytes:
    """Look at the first four bytes without consuming them."""
    if seekable:
        stream.seek(0)
        tag = stream.read(4) or b""
        stream.seek(0)
        return tag
    peek = getattr(stream, "peek", None)
    if peek is None:
        # Plain non-seekable streams: only headerless reading is possible
        # when the caller has already skipped any header.
        return b""
    return peek(4)[:4]


def _skip(stream: BinaryIO, size: int, seekable: bool) -> None:
    if seekable:
        stream.seek(size, io.SEEK_CUR)
    else:
        read_exact(stream, size)


def parse_header(
    stream: BinaryIO,
    defaults: Optional[HeaderlessDefaults] = None,
    skip_unknown_chunks: Optional[bool] = None,
) -> ParsedHeader:
    """
    (Re)parse the header at the start of `stream`.

    Seeks back to offset 0 when the stream is seekable and leaves it positioned
    at the first byte of PCM data. A stream that does not begin with RIFF or
    RIFX is not an error: it is treated as headerless PCM using `defaults`.

    Raises:
        MalformedHeader: tag mismatch, bad bit depth, zero channels, or an
            unexpected chunk before data when skipping is disabled.
        UnsupportedFormat: fmt chunk is not the 16-byte PCM layout.
        TruncatedStream: the stream ends inside the header.
    """
    if defaults is None:
        defaults = config.defaults
    if skip_unknown_chunks is None:
        skip_unknown_chunks = config.parser.skip_unknown_chunks

    seekable = is_seekable(stream)
    tag = _read_tag(stream, seekable)

    if tag == HeaderKind.RIFF.value:
        kind = HeaderKind.RIFF
    elif tag == HeaderKind.RIFX.value:
        kind = HeaderKind.RIFX
    else:
        logger.debug(f"No RIFF/RIFX tag (got {tag!r}), treating stream as raw PCM")
        return ParsedHeader(HeaderKind.NONE, StreamParameters.from_defaults(defaults), 0, 0)

    order = kind.endianness
    read_exact(stream, 4)

    # RIFF chunk size; producers often write it approximately
    riff_size = read_uint32(stream, order)

    if read_exact(stream, 4) != b"WAVE":
        raise MalformedHeader("Missing WAVE form type")

    if read_exact(stream, 4) != b"fmt ":
        raise MalformedHeader("Missing 'fmt ' chunk after WAVE")

    fmt_size = read_uint32(stream, order)
    if fmt_size != PCM_FMT_SIZE:
        raise UnsupportedFormat(f"fmt chunk size {fmt_size}, only {PCM_FMT_SIZE}-byte PCM is supported")

    audio_format = read_uint16(stream, order)
    if audio_format != PCM_FORMAT:
        raise UnsupportedFormat(f"Audio format {audio_format}, only PCM ({PCM_FORMAT}) is supported")

    channels = read_uint16(stream, order)
    sample_rate = read_uint32(stream, order)
    read_uint32(stream, order)  # byte rate, redundant
    read_uint16(stream, order)  # block align, redundant
    bits_per_sample = read_uint16(stream, order)

    if bits_per_sample % 8:
        raise MalformedHeader(f"Bits per sample {bits_per_sample} is not a multiple of 8")
    if channels == 0:
        raise MalformedHeader("Channel count is 0")
    if bits_per_sample == 0:
        raise MalformedHeader("Bits per sample is 0")

    offset = 36
    chunk_id = read_exact(stream, 4)
    chunk_size = read_uint32(stream, order)
    offset += 8
    while chunk_id != b"data":
        if not skip_unknown_chunks:
            raise MalformedHeader(f"Expected 'data' chunk, found {chunk_id!r}")
        padded = chunk_size + (chunk_size & 1)
        logger.warning(f"Skipping {chunk_id!r} chunk ({chunk_size} bytes)")
        _skip(stream, padded, seekable)
        offset += padded
        chunk_id = read_exact(stream, 4)
        chunk_size = read_uint32(stream, order)
        offset += 8

    params = StreamParameters(
        channels=channels,
        sample_width=bits_per_sample // 8,
        sample_rate=sample_rate,
        endianness=order,
    )
    params.frame_count, leftover = divmod(chunk_size, params.frame_size)
    if leftover:
        logger.warning(
            f"Data size {chunk_size} leaves {leftover} bytes after the last "
            f"full frame (frame size {params.frame_size})"
        )

    data_start = offset
    if seekable:
        data_start = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        if riff_size != end - 8 and riff_size != MAX_CHUNK_SIZE:
            logger.warning(f"RIFF size {riff_size} does not match stream length {end}")
        stream.seek(data_start)

    logger.debug(
        f"Parsed {kind.name} header: {params.channels}ch, {params.bits_per_sample}-bit, "
        f"{params.sample_rate}Hz, {params.frame_count} frames, data at {data_start}"
    )
    return ParsedHeader(kind, params, data_start, chunk_size)


def create_wav_header(
    params: StreamParameters,
    data_size: int,
    kind: HeaderKind = HeaderKind.RIFF,
) -> bytes:
    """
    Create a standard WAV header with known data size.

    Args:
        params: Audio parameters (frame_count is ignored)
        data_size: Size of the audio data in bytes
        kind: RIFF for little-endian fields, RIFX for big-endian

    Returns:
        44-byte WAV header
    """
    if kind is HeaderKind.NONE:
        raise ValueError("Cannot build a header for a headerless stream")

    header = struct.pack(
        kind.endianness.struct_prefix + '4sI4s4sIHHIIHH4sI',
        kind.value,
        min(36 + data_size, MAX_CHUNK_SIZE),  # File size
        b'WAVE',
        b'fmt ',
        PCM_FMT_SIZE,    # Subchunk1 size
        PCM_FORMAT,      # Audio format (PCM)
        params.channels,
        params.sample_rate,
        params.byte_rate,
        params.block_align,
        params.bits_per_sample,
        b'data',
        data_size,
    )

    return header


def create_streaming_wav_header(
    params: StreamParameters,
    kind: HeaderKind = HeaderKind.RIFF,
) -> bytes:
    """
    Create a WAV header optimized for infinite streaming.

    Uses maximum file size values to support continuous streaming
    without needing to know the total audio length in advance.
    """
    # Largest data size whose RIFF size still fits in 32 bits
    return create_wav_header(params, MAX_CHUNK_SIZE - 36, kind)
