"""REST endpoints for configuration, offset parameter and state queries.

    GET/PUT/PATCH/DELETE  /api/config
    GET/PUT               /api/offset
    GET                   /api/stats
    GET                   /api/bhp/{timestamp}    what-if query, publishes nothing
    POST                  /api/reset

ConfigurationError maps to 400.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, HTTPException

from bhp_stream.domain.errors import ConfigurationError
from bhp_stream.models.requests import ConfigPatch, OffsetUpdate
from bhp_stream.streaming.coordinator import StreamCoordinator


def create_rest_router(coordinator: StreamCoordinator) -> APIRouter:
    """Factory that wires the REST endpoints to a concrete coordinator."""

    router = APIRouter(prefix="/api", tags=["bhp"])

    # ── Config ───────────────────────────────────────────────────────────

    @router.get("/config")
    async def get_config() -> dict[str, Any]:
        return coordinator.get_config().model_dump()

    @router.put("/config")
    async def replace_config(body: dict[str, Any] = Body(...)) -> dict[str, Any]:
        try:
            return coordinator.set_config(body).model_dump()
        except ConfigurationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @router.patch("/config")
    async def update_config(patch: ConfigPatch) -> dict[str, Any]:
        try:
            return coordinator.update_config(**patch.changes()).model_dump()
        except ConfigurationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @router.delete("/config")
    async def reset_config() -> dict[str, Any]:
        return coordinator.reset_config().model_dump()

    # ── Offset parameter ─────────────────────────────────────────────────

    @router.get("/offset")
    async def get_offset() -> dict[str, Any]:
        return _offset_payload(coordinator)

    @router.put("/offset")
    async def set_offset(update: OffsetUpdate) -> dict[str, Any]:
        try:
            coordinator.set_offset_parameter(update.value)
        except ConfigurationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _offset_payload(coordinator)

    # ── State ────────────────────────────────────────────────────────────

    @router.get("/stats")
    async def stats() -> dict[str, Any]:
        return {
            "state": coordinator.state_stats().model_dump(),
            "window": coordinator.state.window.stats().model_dump(),
        }

    @router.get("/bhp/{timestamp}")
    async def what_if(timestamp: int) -> dict[str, Any]:
        """BHP at an arbitrary timestamp against the current state."""
        result = coordinator.compute_synchronously(timestamp)
        return {
            "value": result.value,
            "pending": result.is_pending,
            "details": result.details.model_dump(mode="json"),
        }

    @router.post("/reset")
    async def reset() -> dict[str, Any]:
        coordinator.reset()
        return {"status": "reset", "state": coordinator.state_stats().model_dump()}

    return router

def _offset_payload(coordinator: StreamCoordinator) -> dict[str, Any]:
    return {
        "mode": coordinator.mode.value,
        "value": coordinator.offset_parameter.latest,
    }
