"""
Wave handle: owns a byte stream and the parameters parsed from its header.
Handles reading and writing whole frames with open/closed lifecycle checks.
"""

import builtins
import functools
import io
import logging
import os
from enum import Enum
from typing import BinaryIO, Iterable, List, Optional, Union

from riffwave import frames as frame_codec
from riffwave.codec import Endianness, write_uint32
from riffwave.config import HeaderlessDefaults, ParserConfig, config
from riffwave.errors import NotOpen, NotSeekable, NotWritable
from riffwave.wav import (
    HEADER_SIZE,
    HeaderKind,
    ParsedHeader,
    StreamParameters,
    is_seekable,
    create_streaming_wav_header,
    create_wav_header,
    parse_header,
)


logger = logging.getLogger(__name__)

Source = Union[str, "os.PathLike[str]", BinaryIO]

UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF


class StreamMode(Enum):
    """Access mode of a handle. Values are the file modes used for paths."""
    READ_ONLY = "rb"
    WRITE_ONLY = "wb"
    READ_WRITE = "r+b"

    @property
    def writable(self) -> bool:
        return self is not StreamMode.READ_ONLY


def _requires_open(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if not self.is_open():
            raise NotOpen(f"{method.__name__}() requires an open handle")
        return method(self, *args, **kwargs)
    return wrapper


def _requires_writable(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if not self.is_open():
            raise NotOpen(f"{method.__name__}() requires an open handle")
        if not self._mode.writable:
            raise NotWritable(f"{method.__name__}() not allowed on a read-only handle")
        return method(self, *args, **kwargs)
    return wrapper


def _check_range(name: str, value: int, low: int, high: int) -> int:
    value = int(value)
    if not low <= value <= high:
        raise ValueError(f"{name} must be in [{low}, {high}], got {value}")
    return value


class Wave:
    """
    Handle over a RIFF/RIFX PCM stream.

    Lifecycle:
    - Created closed, holding default parameters
    - open() binds a stream and parses its header
    - read_frames/read_all/write_frames/rewind while open
    - close() flushes (patching header sizes when writable) and releases the stream

    A handle is not thread-safe; use one handle per stream.
    """

    def __init__(
        self,
        defaults: Optional[HeaderlessDefaults] = None,
        parser: Optional[ParserConfig] = None,
    ):
        self._defaults = defaults or config.defaults
        self._parser = parser or config.parser
        self._reset()

    def _reset(self) -> None:
        self._stream: Optional[BinaryIO] = None
        self._owns_stream = False
        self._mode = StreamMode.READ_ONLY
        self._params = StreamParameters.from_defaults(self._defaults)
        self._kind = HeaderKind.NONE
        self._data_start = 0
        self._data_end = 0      # one past the furthest data byte
        self._offset = 0        # stream position, tracked for non-seekable streams
        self._seekable = False
        self._header_pending = False
        self._dirty = False

    # ------------------------------------------------------------------ lifecycle

    def open(self, source: Source, mode: StreamMode = StreamMode.READ_ONLY) -> "Wave":
        """
        Bind `source` (a path or binary file object) and parse its header.

        On failure the handle stays closed and a stream opened from a path
        is closed again.
        """
        mode = StreamMode(mode)
        if self.is_open():
            logger.debug("Handle already open, closing before re-open")
            self.close()

        owns_stream = isinstance(source, (str, os.PathLike))
        stream = builtins.open(source, mode.value) if owns_stream else source

        try:
            seekable = is_seekable(stream)
            fresh = False
            if mode is StreamMode.WRITE_ONLY:
                if seekable:
                    stream.seek(0)
                    stream.truncate()
                header = ParsedHeader(
                    HeaderKind.NONE, StreamParameters.from_defaults(self._defaults), 0, 0
                )
                fresh = True
            else:
                header = parse_header(stream, self._defaults, self._parser.skip_unknown_chunks)
                if mode is StreamMode.READ_WRITE and header.kind is HeaderKind.NONE and seekable:
                    fresh = stream.seek(0, io.SEEK_END) == 0
                    stream.seek(0)
        except Exception:
            if owns_stream:
                stream.close()
            raise

        self._stream = stream
        self._owns_stream = owns_stream
        self._mode = mode
        self._params = header.params
        self._kind = header.kind
        self._data_start = header.data_start
        self._offset = header.data_start
        self._seekable = seekable
        self._header_pending = fresh and self._parser.emit_header
        self._dirty = False

        if header.kind is not HeaderKind.NONE:
            self._data_end = header.data_start + header.data_size
        elif seekable and not fresh:
            self._data_end = stream.seek(0, io.SEEK_END)
            stream.seek(0)
        else:
            self._data_end = 0

        logger.debug(
            f"Opened {header.kind.name} stream ({mode.name}, "
            f"{'seekable' if seekable else 'not seekable'})"
        )
        return self

    def is_open(self) -> bool:
        return self._stream is not None

    @_requires_open
    def close(self) -> None:
        """Flush pending writes and release the stream."""
        try:
            self.flush()
        finally:
            if self._owns_stream:
                self._stream.close()
            self._reset()

    @_requires_open
    def flush(self) -> None:
        """Patch header sizes for written data and flush the stream."""
        if self._mode.writable and self._dirty:
            self._patch_header()
            self._dirty = False
        if hasattr(self._stream, "flush"):
            self._stream.flush()

    @_requires_open
    def rewind(self) -> None:
        """Reposition to the first frame."""
        if not self._seekable:
            raise NotSeekable("Cannot rewind a non-seekable stream")
        self._stream.seek(self._data_start if self.has_header else 0)

    @_requires_open
    def tell(self) -> int:
        """Index of the next frame to be read or written."""
        if not self._seekable:
            raise NotSeekable("Position unknown on a non-seekable stream")
        return (self._stream.tell() - self._data_start) // self._params.frame_size

    def __enter__(self) -> "Wave":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.is_open():
            self.close()

    def __repr__(self) -> str:
        if not self.is_open():
            return "<Wave closed>"
        p = self._params
        return (
            f"<Wave {self._kind.name} {self._mode.name} {p.channels}ch "
            f"{p.bits_per_sample}-bit {p.sample_rate}Hz {p.frame_count} frames>"
        )

    # ------------------------------------------------------------------ frame I/O

    @_requires_open
    def read_frames(self, n: int) -> List[bytes]:
        frames = frame_codec.read_frames(self._stream, self._params, n, self._remaining())
        self._offset += len(frames) * self._params.frame_size
        return frames

    @_requires_open
    def read_all(self) -> List[bytes]:
        """Read the rest of the data chunk (to end of stream when headerless)."""
        frames = frame_codec.read_all(self._stream, self._params, self._remaining())
        self._offset += len(frames) * self._params.frame_size
        return frames

    def _position(self) -> int:
        return self._stream.tell() if self._seekable else self._offset

    def _remaining(self) -> Optional[int]:
        """Bytes left in the data chunk, None for headerless streams."""
        if self._kind is HeaderKind.NONE:
            return None
        return self._data_end - self._position()

    @_requires_writable
    def write_frames(self, frames: Iterable[bytes]) -> None:
        """Write frames at the current position. All sizes are checked first."""
        frames = list(frames)
        frame_codec.validate_frames(self._params, frames)

        if self._header_pending:
            self._write_initial_header()

        written = frame_codec.write_frames(self._stream, self._params, frames)
        if self._seekable:
            position = self._stream.tell()
        else:
            position = self._offset + written
        self._offset = position
        self._data_end = max(self._data_end, position)
        self._params.frame_count = (self._data_end - self._data_start) // self._params.frame_size
        self._dirty = True
        logger.debug(f"Wrote {len(frames)} frames ({written} bytes)")

    def _write_initial_header(self) -> None:
        kind = HeaderKind.for_endianness(self._params.endianness)
        if self._seekable:
            header = create_wav_header(self._params, 0, kind)
        else:
            header = create_streaming_wav_header(self._params, kind)
        self._stream.write(header)
        self._kind = kind
        self._data_start = HEADER_SIZE
        self._data_end = HEADER_SIZE
        self._offset = HEADER_SIZE
        self._header_pending = False
        logger.debug(f"Wrote {kind.name} header")

    def _patch_header(self) -> None:
        if self._kind is HeaderKind.NONE or not self._seekable:
            return

        stream = self._stream
        position = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        data_size = self._data_end - self._data_start
        kind = HeaderKind.for_endianness(self._params.endianness)
        order = kind.endianness

        # RIFF tag and fmt payload, then the two size fields
        stream.seek(0)
        stream.write(create_wav_header(self._params, data_size, kind)[:36])
        stream.seek(4)
        write_uint32(stream, min(end - 8, UINT32_MAX), order)
        stream.seek(self._data_start - 4)
        write_uint32(stream, data_size, order)
        stream.seek(position)

        self._kind = kind
        logger.debug(f"Patched {kind.name} header: data size {data_size}, stream length {end}")

    # ------------------------------------------------------------------ parameters

    @property
    @_requires_open
    def params(self) -> StreamParameters:
        """Snapshot of the current parameters."""
        return self._params.copy()

    @property
    @_requires_open
    def channels(self) -> int:
        return self._params.channels

    @channels.setter
    @_requires_writable
    def channels(self, value: int) -> None:
        self._params.channels = _check_range("channels", value, 1, UINT16_MAX)

    @property
    @_requires_open
    def sample_width(self) -> int:
        """Bytes per sample per channel."""
        return self._params.sample_width

    @sample_width.setter
    @_requires_writable
    def sample_width(self, value: int) -> None:
        # bits per sample is stored as a 16-bit field
        self._params.sample_width = _check_range("sample_width", value, 1, UINT16_MAX // 8)

    @property
    @_requires_open
    def sample_rate(self) -> int:
        return self._params.sample_rate

    @sample_rate.setter
    @_requires_writable
    def sample_rate(self, value: int) -> None:
        self._params.sample_rate = _check_range("sample_rate", value, 0, UINT32_MAX)

    @property
    @_requires_open
    def endianness(self) -> Endianness:
        return self._params.endianness

    @endianness.setter
    @_requires_writable
    def endianness(self, value: Endianness) -> None:
        self._params.endianness = Endianness(value)

    @property
    @_requires_open
    def frame_count(self) -> int:
        return self._params.frame_count

    @property
    @_requires_open
    def duration(self) -> float:
        """Length in seconds, 0.0 when the sample rate is 0."""
        if not self._params.sample_rate:
            return 0.0
        return self._params.frame_count / self._params.sample_rate

    @property
    @_requires_open
    def header_kind(self) -> HeaderKind:
        return self._kind

    @property
    @_requires_open
    def has_header(self) -> bool:
        return self._kind is not HeaderKind.NONE

    @property
    @_requires_open
    def data_start(self) -> int:
        return self._data_start

    @property
    @_requires_open
    def seekable(self) -> bool:
        return self._seekable

    @property
    @_requires_open
    def mode(self) -> StreamMode:
        return self._mode


def open_wave(source: Source, mode: StreamMode = StreamMode.READ_ONLY, **kwargs) -> Wave:
    """Create a handle and open it on `source`."""
    return Wave(**kwargs).open(source, mode)
