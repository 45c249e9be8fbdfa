"""
Configuration settings for the wave library and the streaming server.
Centralized configuration management with environment variable support.
"""

import os
from dataclasses import dataclass, field


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class HeaderlessDefaults:
    """Parameters assumed for raw PCM streams without a RIFF/RIFX header."""
    channels: int = 1
    sample_width: int = 1   # bytes per sample per channel
    sample_rate: int = 8000

    def __post_init__(self):
        if self.channels < 1:
            raise ValueError(f"channels must be at least 1, got {self.channels}")
        if self.sample_width < 1:
            raise ValueError(f"sample_width must be at least 1, got {self.sample_width}")
        if self.sample_rate < 0:
            raise ValueError(f"sample_rate must be non-negative, got {self.sample_rate}")

    @property
    def frame_size(self) -> int:
        return self.channels * self.sample_width


@dataclass(frozen=True)
class ParserConfig:
    """Header parsing and writing behaviour."""
    skip_unknown_chunks: bool = False  # False = LIST/fact before data is an error
    emit_header: bool = True           # write RIFF/RIFX headers on fresh streams


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""
    host: str = "127.0.0.1"
    port: int = 8000
    wav_file: str = "audio.wav"
    chunk_frames: int = 4096
    connection_timeout: float = 5.0
    max_clients: int = 100


@dataclass
class AppConfig:
    """Main application configuration."""
    defaults: HeaderlessDefaults = field(default_factory=HeaderlessDefaults)
    parser: ParserConfig = field(default_factory=ParserConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls(
            defaults=HeaderlessDefaults(
                channels=int(os.getenv("WAVE_DEFAULT_CHANNELS", "1")),
                sample_width=int(os.getenv("WAVE_DEFAULT_SAMPLE_WIDTH", "1")),
                sample_rate=int(os.getenv("WAVE_DEFAULT_SAMPLE_RATE", "8000")),
            ),
            parser=ParserConfig(
                skip_unknown_chunks=_env_flag("WAVE_SKIP_UNKNOWN_CHUNKS"),
                emit_header=_env_flag("WAVE_EMIT_HEADER", "true"),
            ),
            server=ServerConfig(
                host=os.getenv("SERVER_HOST", "127.0.0.1"),
                port=int(os.getenv("SERVER_PORT", "8000")),
                wav_file=os.getenv("WAV_FILE", "audio.wav"),
                chunk_frames=int(os.getenv("CHUNK_FRAMES", "4096")),
                max_clients=int(os.getenv("MAX_CLIENTS", "100")),
            ),
        )


# Global configuration instance
config = AppConfig.from_env()
