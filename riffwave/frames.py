"""
Frame codec: moves whole frames between a byte stream and the caller.
A frame is channels * sample_width raw bytes; sample encoding is not interpreted.
"""

import logging
from typing import BinaryIO, Iterable, List, Optional, Sequence

from riffwave.errors import FrameSizeMismatch, TruncatedStream
from riffwave.wav import StreamParameters


logger = logging.getLogger(__name__)


def split_frames(data: bytes, frame_size: int) -> List[bytes]:
    """Split a frame-aligned byte run into frames."""
    return [data[i:i + frame_size] for i in range(0, len(data), frame_size)]


def validate_frames(params: StreamParameters, frames: Sequence[bytes]) -> None:
    """Raise FrameSizeMismatch for the first frame of the wrong length."""
    frame_size = params.frame_size
    for index, frame in enumerate(frames):
        if len(frame) != frame_size:
            raise FrameSizeMismatch(index, len(frame), frame_size)


def read_frames(
    stream: BinaryIO,
    params: StreamParameters,
    n: int,
    limit: Optional[int] = None,
) -> List[bytes]:
    """
    Read exactly `n` frames from the current position.

    `limit` caps the bytes that may be consumed (the rest of the data chunk).
    Raises TruncatedStream instead of returning a short or partial result.
    """
    if n < 0:
        raise ValueError(f"Frame count must be non-negative, got {n}")
    frame_size = params.frame_size
    wanted = n * frame_size
    size = wanted if limit is None else min(wanted, max(limit, 0))
    data = (stream.read(size) or b"") if size else b""
    if len(data) != wanted:
        raise TruncatedStream(wanted, len(data))
    return split_frames(data, frame_size)


def read_all(
    stream: BinaryIO,
    params: StreamParameters,
    limit: Optional[int] = None,
) -> List[bytes]:
    """
    Read frames until end of stream, or until `limit` bytes have been read.

    A trailing partial frame is an error.
    """
    frame_size = params.frame_size
    if limit is None:
        data = stream.read() or b""
    else:
        data = (stream.read(limit) or b"") if limit > 0 else b""
    leftover = len(data) % frame_size
    if leftover:
        raise TruncatedStream(len(data) + frame_size - leftover, len(data))
    frames = split_frames(data, frame_size)
    logger.debug(f"Read {len(frames)} frames ({len(data)} bytes) to end of stream")
    return frames


def write_frames(stream: BinaryIO, params: StreamParameters, frames: Iterable[bytes]) -> int:
    """
    Write frames verbatim, in order. Returns the number of bytes written.

    Every frame is size-checked before anything is written, so a bad frame
    leaves the stream untouched.
    """
    frames = list(frames)
    validate_frames(params, frames)

    data = b"".join(bytes(frame) for frame in frames)
    if data:
        stream.write(data)
    return len(data)
