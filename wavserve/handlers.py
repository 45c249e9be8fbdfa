"""
Request handlers for the WAV streaming server.
HTTP stream handler for PCM audio, info endpoint.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Awaitable, Dict, Optional

from riffwave.config import config
from riffwave.errors import MalformedHeader, TruncatedStream, UnsupportedFormat, WaveError
from riffwave.handle import Wave
from riffwave.wav import HeaderKind, create_streaming_wav_header
from wavserve.connection import connection_manager


logger = logging.getLogger(__name__)


# Type aliases for ASGI
Scope = Dict[str, Any]
Receive = Callable[[], Awaitable[Dict[str, Any]]]
Send = Callable[[Dict[str, Any]], Awaitable[None]]


async def send_error(send: Send, status: int, body: bytes) -> None:
    """Send an HTTP error response."""
    await send({
        "type": "http.response.start",
        "status": status,
        "headers": [
            (b"content-type", b"text/plain"),
            (b"content-length", str(len(body)).encode()),
        ],
    })
    await send({
        "type": "http.response.body",
        "body": body,
    })


async def open_configured_wave(send: Send) -> Optional[Wave]:
    """Open the configured WAV file, answering the request on failure."""
    path = config.server.wav_file
    try:
        return Wave().open(path)
    except FileNotFoundError:
        logger.warning(f"WAV file not found: {path}")
        await send_error(send, 404, b"Not found")
    except OSError as e:
        logger.error(f"Cannot open {path}: {e}")
        await send_error(send, 500, b"WAV file unavailable")
    except (MalformedHeader, UnsupportedFormat, TruncatedStream) as e:
        logger.warning(f"Cannot stream {path}: {e}")
        await send_error(send, 415, f"Unsupported WAV file: {e}".encode())
    return None


class WavStreamHandler:
    """Handler for HTTP WAV streaming.

    Protocol:
    1. Client requests GET /stream
    2. Server responds with Content-Type: audio/wav (no Content-Length = streaming)
    3. Server sends a streaming WAV header (maximal size fields)
    4. Server sends PCM frames in batches of chunk_frames
    5. Response ends at the last frame or when the client disconnects
    """

    @staticmethod
    async def handle(scope: Scope, receive: Receive, send: Send) -> None:
        """Handle HTTP stream request."""
        client = await connection_manager.register_client()

        if client is None:
            await send_error(send, 503, b"Server at capacity, try again later")
            return

        wave = await open_configured_wave(send)
        if wave is None:
            await connection_manager.unregister_client(client)
            return

        if not wave.has_header:
            wave.close()
            await connection_manager.unregister_client(client)
            await send_error(send, 415, b"Headerless PCM cannot be streamed")
            return

        header = create_streaming_wav_header(
            wave.params, HeaderKind.for_endianness(wave.endianness)
        )

        # No Content-Length: the response is streamed
        await send({
            "type": "http.response.start",
            "status": 200,
            "headers": [
                (b"content-type", b"audio/wav"),
                (b"cache-control", b"no-cache, no-store"),
                (b"access-control-allow-origin", b"*"),
            ],
        })

        # Monitor for client disconnect
        disconnect_event = asyncio.Event()

        async def watch_disconnect():
            try:
                while True:
                    msg = await receive()
                    if msg["type"] == "http.disconnect":
                        disconnect_event.set()
                        return
            except asyncio.CancelledError:
                disconnect_event.set()
                raise
            except Exception:
                disconnect_event.set()

        disconnect_task = asyncio.create_task(watch_disconnect())

        try:
            await send({"type": "http.response.body", "body": header, "more_body": True})

            chunk_frames = config.server.chunk_frames
            while not disconnect_event.is_set():
                remaining = wave.frame_count - wave.tell()
                if remaining <= 0:
                    break

                # File reads run off the event loop
                frames = await asyncio.to_thread(wave.read_frames, min(chunk_frames, remaining))
                chunk = b"".join(frames)
                await send({
                    "type": "http.response.body",
                    "body": chunk,
                    "more_body": True,
                })
                client.stats.update(len(frames), len(chunk))

        except WaveError as e:
            logger.error(f"Stream of {config.server.wav_file} aborted: {e}")
        finally:
            disconnect_task.cancel()
            try:
                await disconnect_task
            except asyncio.CancelledError:
                pass
            wave.close()
            await connection_manager.unregister_client(client)
            # Close HTTP response
            try:
                await send({
                    "type": "http.response.body",
                    "body": b"",
                    "more_body": False,
                })
            except Exception:
                pass


class InfoHandler:
    """Handler for stream parameters and server statistics (HTTP)."""

    @staticmethod
    async def handle(scope: Scope, receive: Receive, send: Send) -> None:
        """Handle info request."""
        wave = await open_configured_wave(send)
        if wave is None:
            return

        with wave:
            info = {
                "file": config.server.wav_file,
                "header": wave.header_kind.name,
                "channels": wave.channels,
                "sample_width": wave.sample_width,
                "sample_rate": wave.sample_rate,
                "endianness": wave.endianness.name.lower(),
                "frame_count": wave.frame_count,
                "duration_seconds": round(wave.duration, 3),
                "connections": connection_manager.get_stats(),
            }

        body = json.dumps(info, indent=2).encode()

        await send({
            "type": "http.response.start",
            "status": 200,
            "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", str(len(body)).encode()),
                (b"access-control-allow-origin", b"*"),
            ],
        })
        await send({
            "type": "http.response.body",
            "body": body,
        })
