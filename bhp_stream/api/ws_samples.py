"""WebSocket endpoint for sample ingestion.

Path: /ws/samples

Accepts JSON matching the Sample schema, validates it at the boundary,
feeds it through the StreamCoordinator and acknowledges with the enhanced
sample.  Rejections are acknowledged with ``{"status": "error", ...}`` and
the connection stays open.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from bhp_stream.domain.errors import OutOfOrderSampleError
from bhp_stream.domain.sample import Sample
from bhp_stream.streaming.coordinator import StreamCoordinator

logger = logging.getLogger(__name__)


def create_samples_router(coordinator: StreamCoordinator) -> APIRouter:
    """Factory that wires the ingestion endpoint to a concrete coordinator."""

    router = APIRouter()

    @router.websocket("/ws/samples")
    async def ingest_samples(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("Sample source connected")

        try:
            while True:
                raw = await websocket.receive_json()

                # ── Validate at the boundary ─────────────────────────────
                try:
                    sample = Sample.model_validate(raw)
                except ValidationError as exc:
                    await websocket.send_json({
                        "status": "error",
                        "detail": "sample validation failed",
                        "errors": [err["msg"] for err in exc.errors()],
                    })
                    continue

                # ── Ingest ───────────────────────────────────────────────
                try:
                    enhanced = coordinator.ingest(sample)
                except OutOfOrderSampleError as exc:
                    await websocket.send_json({"status": "error", "detail": str(exc)})
                    continue

                await websocket.send_json({
                    "status": "accepted",
                    "sample": enhanced.model_dump(mode="json"),
                })

        except WebSocketDisconnect:
            logger.info("Sample source disconnected")

    return router
