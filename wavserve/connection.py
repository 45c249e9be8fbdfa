"""
Client connection management for HTTP WAV streaming.
Tracks active listeners and enforces the client limit.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Optional, Any
import logging
import time


logger = logging.getLogger(__name__)


@dataclass
class ClientStats:
    """Statistics for a single client connection."""
    connected_at: float = field(default_factory=time.time)
    frames_sent: int = 0
    bytes_sent: int = 0
    last_activity: float = field(default_factory=time.time)

    def update(self, frame_count: int, bytes_count: int) -> None:
        """Update stats after sending a batch of frames."""
        self.frames_sent += frame_count
        self.bytes_sent += bytes_count
        self.last_activity = time.time()


class ClientSession:
    """One HTTP streaming listener."""

    def __init__(self):
        self._stats = ClientStats()
        self._id = id(self)

    @property
    def id(self) -> int:
        return self._id

    @property
    def stats(self) -> ClientStats:
        return self._stats


class ConnectionManager:
    """
    Manages HTTP streaming client connections.

    Features:
    - Client limit (503 when exceeded)
    - Per-client frame/byte statistics
    """

    _instance: Optional["ConnectionManager"] = None

    def __new__(cls) -> "ConnectionManager":
        """Singleton pattern for global connection management."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._clients: Dict[int, ClientSession] = {}
        self._lock = asyncio.Lock()
        self._max_clients: int = 100
        self._frames_served: int = 0
        self._initialized = True

        logger.info("ConnectionManager initialized")

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def set_max_clients(self, max_clients: int) -> None:
        """Set maximum number of allowed clients."""
        self._max_clients = max_clients

    async def register_client(self) -> Optional[ClientSession]:
        """Register a new streaming client. Returns None when at capacity."""
        async with self._lock:
            if self.client_count >= self._max_clients:
                logger.warning(f"Max clients ({self._max_clients}) reached, rejecting connection")
                return None

            client = ClientSession()
            self._clients[client.id] = client

            logger.debug(f"Registered client {client.id} (total: {self.client_count})")
            return client

    async def unregister_client(self, client: ClientSession) -> None:
        """Unregister a client connection."""
        async with self._lock:
            self._clients.pop(client.id, None)
            self._frames_served += client.stats.frames_sent

            logger.debug(
                f"Unregistered client {client.id} "
                f"(sent {client.stats.frames_sent} frames, {client.stats.bytes_sent} bytes, "
                f"total: {self.client_count})"
            )

    def get_stats(self) -> Dict[str, Any]:
        """Get connection statistics."""
        return {
            "clients": self.client_count,
            "max_clients": self._max_clients,
            "frames_served": self._frames_served + sum(
                c.stats.frames_sent for c in self._clients.values()
            ),
        }


connection_manager = ConnectionManager()
