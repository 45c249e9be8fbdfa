import logging
from typing import Dict, Any, Callable, Awaitable

from riffwave import config
from wavserve import (
    WavStreamHandler,
    InfoHandler,
    connection_manager,
    send_error,
)


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Type aliases
Scope = Dict[str, Any]
Receive = Callable[[], Awaitable[Dict[str, Any]]]
Send = Callable[[Dict[str, Any]], Awaitable[None]]


class StreamingApp:
    """
    ASGI application serving one WAV file.

    Routes:
    - /stream  → WAV audio stream (PCM frames)
    - /info    → Stream parameters and connection statistics (JSON)
    """

    def __init__(self):
        self._routes = {
            "/stream": WavStreamHandler.handle,
            "/info": InfoHandler.handle,
        }
        connection_manager.set_max_clients(config.server.max_clients)
        logger.info(
            f"StreamingApp initialized for {config.server.wav_file} "
            f"with max {config.server.max_clients} clients"
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        if scope["type"] == "http":
            path = scope.get("path", "/")
            handler = self._routes.get(path)

            if handler is None:
                await send_error(send, 404, b"Not found")
            elif scope.get("method", "GET") != "GET":
                await send_error(send, 405, b"Method not allowed")
            else:
                await handler(scope, receive, send)

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Handle ASGI lifespan events for startup/shutdown."""
        while True:
            message = await receive()

            if message["type"] == "lifespan.startup":
                logger.info("ASGI lifespan: startup")
                await send({"type": "lifespan.startup.complete"})

            elif message["type"] == "lifespan.shutdown":
                logger.info(
                    f"ASGI lifespan: shutdown ({connection_manager.client_count} clients connected)"
                )
                await send({"type": "lifespan.shutdown.complete"})
                return


# Create ASGI application instance
app = StreamingApp()
