"""
Error types raised by the wave library.
Every failure is a subclass of WaveError so callers can catch them as a group.
"""


class WaveError(Exception):
    """Base class for all wave handle and parser errors."""


class NotOpen(WaveError):
    """Operation requires an open handle."""


class NotWritable(WaveError):
    """Mutation attempted on a handle opened read-only."""


class NotSeekable(WaveError):
    """Operation needs to reposition a cursor that cannot seek."""


class MalformedHeader(WaveError):
    """Structural tag mismatch or inconsistent size field in the RIFF header."""


class UnsupportedFormat(WaveError):
    """Valid RIFF/WAVE structure carrying an encoding other than 16-byte-fmt PCM."""


class TruncatedStream(WaveError, EOFError):
    """Fewer bytes available than a read requires."""

    def __init__(self, expected: int, got: int, what: str = "bytes"):
        super().__init__(f"Expected {expected} {what}, got {got}")
        self.expected = expected
        self.got = got


class FrameSizeMismatch(WaveError, ValueError):
    """A frame passed to write_frames has the wrong length."""

    def __init__(self, index: int, size: int, frame_size: int):
        super().__init__(
            f"Frame {index} is {size} bytes, expected {frame_size}"
        )
        self.index = index
        self.size = size
        self.frame_size = frame_size
