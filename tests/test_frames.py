"""Tests for the frame codec."""

import io

import pytest

from riffwave.errors import FrameSizeMismatch, TruncatedStream
from riffwave.frames import read_all, read_frames, split_frames, write_frames
from riffwave.wav import StreamParameters


STEREO_16 = StreamParameters(channels=2, sample_width=2)
MONO_8 = StreamParameters(channels=1, sample_width=1)


class TestReadFrames:
    """Tests for read_frames."""

    def test_reads_requested_frames(self):
        stream = io.BytesIO(bytes(range(16)))
        frames = read_frames(stream, STEREO_16, 3)
        assert frames == [bytes([0, 1, 2, 3]), bytes([4, 5, 6, 7]), bytes([8, 9, 10, 11])]
        assert stream.tell() == 12

    def test_zero_frames(self):
        stream = io.BytesIO(b"\x00" * 4)
        assert read_frames(stream, STEREO_16, 0) == []
        assert stream.tell() == 0

    def test_insufficient_bytes(self):
        stream = io.BytesIO(bytes(range(10)))
        with pytest.raises(TruncatedStream):
            read_frames(stream, STEREO_16, 3)

    def test_negative_count(self):
        with pytest.raises(ValueError):
            read_frames(io.BytesIO(b""), MONO_8, -1)

    def test_limit_caps_consumption(self):
        stream = io.BytesIO(bytes(range(16)))
        with pytest.raises(TruncatedStream) as exc_info:
            read_frames(stream, STEREO_16, 3, limit=8)
        assert exc_info.value.expected == 12
        assert exc_info.value.got == 8
        assert stream.tell() == 8

    def test_limit_not_reached(self):
        stream = io.BytesIO(bytes(range(16)))
        assert read_frames(stream, STEREO_16, 2, limit=12) == [bytes([0, 1, 2, 3]), bytes([4, 5, 6, 7])]
        assert stream.tell() == 8


class TestReadAll:
    """Tests for read_all."""

    def test_reads_to_end(self):
        stream = io.BytesIO(bytes(range(12)))
        stream.seek(4)
        assert read_all(stream, STEREO_16) == [bytes([4, 5, 6, 7]), bytes([8, 9, 10, 11])]

    def test_empty(self):
        assert read_all(io.BytesIO(b""), STEREO_16) == []

    def test_trailing_remainder_is_error(self):
        with pytest.raises(TruncatedStream) as exc_info:
            read_all(io.BytesIO(bytes(range(10))), STEREO_16)
        assert exc_info.value.got == 10
        assert exc_info.value.expected == 12

    def test_limit_leaves_trailing_bytes(self):
        stream = io.BytesIO(b"\x01\x02\x03\x00LIST")
        assert read_all(stream, MONO_8, limit=3) == [b"\x01", b"\x02", b"\x03"]
        assert stream.read() == b"\x00LIST"

    def test_exhausted_limit(self):
        stream = io.BytesIO(b"\x00" * 4)
        assert read_all(stream, STEREO_16, limit=0) == []
        assert stream.tell() == 0


class TestWriteFrames:
    """Tests for write_frames."""

    def test_writes_verbatim(self):
        stream = io.BytesIO()
        written = write_frames(stream, STEREO_16, [b"\x01\x02\x03\x04", bytearray(b"\x05\x06\x07\x08")])
        assert written == 8
        assert stream.getvalue() == bytes(range(1, 9))

    def test_accepts_generator(self):
        stream = io.BytesIO()
        write_frames(stream, MONO_8, (bytes([i]) for i in range(3)))
        assert stream.getvalue() == b"\x00\x01\x02"

    def test_mismatch_writes_nothing(self):
        stream = io.BytesIO(b"keep")
        stream.seek(4)
        with pytest.raises(FrameSizeMismatch) as exc_info:
            write_frames(stream, STEREO_16, [b"\x00" * 4, b"\x00" * 4, b"\x00" * 3])
        assert exc_info.value.index == 2
        assert exc_info.value.frame_size == 4
        assert stream.getvalue() == b"keep"

    def test_mismatch_is_value_error(self):
        with pytest.raises(ValueError):
            write_frames(io.BytesIO(), MONO_8, [b"\x00\x00"])


def test_split_frames():
    assert split_frames(b"abcdef", 2) == [b"ab", b"cd", b"ef"]
