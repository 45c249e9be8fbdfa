"""
RIFF/RIFX PCM wave file library.
"""

from riffwave.config import config, AppConfig, HeaderlessDefaults, ParserConfig, ServerConfig
from riffwave.codec import Endianness, read_uint16, read_uint32, write_uint16, write_uint32
from riffwave.errors import (
    WaveError,
    NotOpen,
    NotWritable,
    NotSeekable,
    MalformedHeader,
    UnsupportedFormat,
    TruncatedStream,
    FrameSizeMismatch,
)
from riffwave.wav import (
    HeaderKind,
    StreamParameters,
    ParsedHeader,
    parse_header,
    create_wav_header,
    create_streaming_wav_header,
)
from riffwave.frames import read_frames, read_all, write_frames
from riffwave.handle import Wave, StreamMode, open_wave

__all__ = [
    # Configuration
    "config",
    "AppConfig",
    "HeaderlessDefaults",
    "ParserConfig",
    "ServerConfig",
    # Integer codec
    "Endianness",
    "read_uint16",
    "read_uint32",
    "write_uint16",
    "write_uint32",
    # Errors
    "WaveError",
    "NotOpen",
    "NotWritable",
    "NotSeekable",
    "MalformedHeader",
    "UnsupportedFormat",
    "TruncatedStream",
    "FrameSizeMismatch",
    # Header
    "HeaderKind",
    "StreamParameters",
    "ParsedHeader",
    "parse_header",
    "create_wav_header",
    "create_streaming_wav_header",
    # Frames
    "read_frames",
    "read_all",
    "write_frames",
    # Handle
    "Wave",
    "StreamMode",
    "open_wave",
]
