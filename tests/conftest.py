"""
Pytest configuration and fixtures for wave tests.
"""
import io
import struct

import pytest

from riffwave.config import HeaderlessDefaults, ParserConfig


def build_wav(
    data: bytes = b"",
    channels: int = 2,
    bits_per_sample: int = 16,
    sample_rate: int = 44100,
    tag: bytes = b"RIFF",
    form: bytes = b"WAVE",
    fmt_size: int = 16,
    audio_format: int = 1,
    data_size=None,
    riff_size=None,
    extra_chunks: bytes = b"",
) -> bytes:
    """Assemble a PCM WAV file in memory, RIFX fields big-endian."""
    order = ">" if tag == b"RIFX" else "<"
    if data_size is None:
        data_size = len(data)
    block_align = channels * (bits_per_sample // 8)
    fmt = struct.pack(
        order + "HHIIHH",
        audio_format,
        channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        bits_per_sample,
    )
    body = (
        form
        + b"fmt " + struct.pack(order + "I", fmt_size) + fmt
        + extra_chunks
        + b"data" + struct.pack(order + "I", data_size) + data
    )
    if riff_size is None:
        riff_size = len(body)
    return tag + struct.pack(order + "I", riff_size) + body


def build_chunk(chunk_id: bytes, payload: bytes, tag: bytes = b"RIFF") -> bytes:
    order = ">" if tag == b"RIFX" else "<"
    pad = b"\x00" if len(payload) % 2 else b""
    return chunk_id + struct.pack(order + "I", len(payload)) + payload + pad


@pytest.fixture
def make_wav():
    """Fixture providing the in-memory WAV builder."""
    return build_wav


@pytest.fixture
def make_chunk():
    """Fixture providing the chunk builder."""
    return build_chunk


@pytest.fixture
def stereo_frames():
    """Ten 16-bit stereo frames with distinct bytes."""
    return [bytes([i, i + 1, i + 2, i + 3]) for i in range(0, 40, 4)]


@pytest.fixture
def stereo_wav(make_wav, stereo_frames):
    """Seekable in-memory RIFF stream holding stereo_frames."""
    return io.BytesIO(make_wav(b"".join(stereo_frames)))


@pytest.fixture
def defaults():
    """Headerless defaults independent of the environment."""
    return HeaderlessDefaults()


@pytest.fixture
def parser_config():
    return ParserConfig()


class NonSeekableBuffer(io.BytesIO):
    """In-memory stream that reports itself as non-seekable, like a socket."""

    def seekable(self):
        return False


@pytest.fixture
def non_seekable():
    return NonSeekableBuffer


class NonSeekableSource(io.RawIOBase):
    """Raw read-only source without seek support."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0

    def readable(self):
        return True

    def readinto(self, buf):
        chunk = self._data[self._pos:self._pos + len(buf)]
        buf[:len(chunk)] = chunk
        self._pos += len(chunk)
        return len(chunk)


@pytest.fixture
def non_seekable_reader():
    """Build a buffered, non-seekable reader (supports peek) over bytes."""
    def factory(data: bytes):
        return io.BufferedReader(NonSeekableSource(data))
    return factory
