"""
Service modules for the WAV streaming server.
"""

from wavserve.connection import (
    connection_manager,
    ConnectionManager,
    ClientSession,
)
from wavserve.handlers import (
    WavStreamHandler,
    InfoHandler,
    send_error,
)

__all__ = [
    # Connection management
    "connection_manager",
    "ConnectionManager",
    "ClientSession",
    # Handlers
    "WavStreamHandler",
    "InfoHandler",
    "send_error",
]
