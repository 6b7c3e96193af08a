"""Live stream WebSocket: pushes enhanced samples to connected frontends.

Path: /ws/stream

    producer → /ws/samples or simulation → StreamCoordinator
                                                ↓
                                   enhanced_samples / stats channels
                                                ↓
    FE  ←  /ws/stream  ←  per-connection queue ←┘

Each connection subscribes to the coordinator's channels, so it first
receives the latest enhanced sample and stats (replay), then every new one
in publish order.  A client that falls too far behind overflows its queue;
the channel then drops its subscription and the connection is closed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from bhp_stream.streaming.coordinator import StreamCoordinator

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000


def create_stream_router(
    coordinator: StreamCoordinator,
    queue_size: int = DEFAULT_QUEUE_SIZE,
) -> APIRouter:
    """Factory that creates the live stream endpoint."""

    router = APIRouter()

    @router.websocket("/ws/stream")
    async def stream(websocket: WebSocket) -> None:
        await websocket.accept()
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=queue_size)

        def enqueue(kind: str):
            def _put(value) -> None:
                queue.put_nowait({"type": kind, "data": value.model_dump(mode="json")})
            return _put

        subscriptions = [
            coordinator.enhanced_samples.subscribe(enqueue("sample")),
            coordinator.stats.subscribe(enqueue("stats")),
            coordinator.config.subscribe(enqueue("config")),
        ]
        logger.info("Stream client connected")

        receiver = asyncio.create_task(_drain_client(websocket))
        try:
            while all(sub.active for sub in subscriptions):
                getter = asyncio.create_task(queue.get())
                done, _ = await asyncio.wait(
                    {getter, receiver}, return_when=asyncio.FIRST_COMPLETED
                )
                if receiver in done:
                    getter.cancel()
                    break
                await websocket.send_json(getter.result())
            else:
                logger.warning("Stream client fell behind; closing connection")
                await websocket.close(code=1013)
        except WebSocketDisconnect:
            pass
        finally:
            receiver.cancel()
            for sub in subscriptions:
                sub.unsubscribe()
            logger.info("Stream client disconnected")

    return router


async def _drain_client(websocket: WebSocket) -> None:
    """Read until the client goes away; answer "ping" with "pong"."""
    try:
        while True:
            data = await websocket.receive_text()
            if data.strip().lower() == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        return
