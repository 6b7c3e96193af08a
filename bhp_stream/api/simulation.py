"""REST endpoints that drive the coordinator from synthetic data.

    GET   /api/simulation           status and generator config
    POST  /api/simulation/start     optional pattern / speed / seed / rate
    POST  /api/simulation/stop
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException

from bhp_stream.domain.errors import ConfigurationError
from bhp_stream.models.requests import SimulationStart
from bhp_stream.services.simulation_runner import SimulationRunner
from bhp_stream.simulation.generators import available_patterns, pattern_description


def create_simulation_router(runner: SimulationRunner) -> APIRouter:
    """Factory that wires the simulation endpoints to a runner."""

    router = APIRouter(prefix="/api/simulation", tags=["simulation"])

    @router.get("")
    async def status() -> dict[str, Any]:
        return {
            **runner.status(),
            "config": runner.generator.get_config().model_dump(mode="json"),
            "patterns": {p.value: pattern_description(p) for p in available_patterns()},
        }

    @router.post("/start")
    async def start(request: SimulationStart | None = None) -> dict[str, Any]:
        if runner.running:
            raise HTTPException(status_code=409, detail="simulation already running")
        request = request or SimulationStart()
        generator = runner.generator
        try:
            changes = request.generator_changes()
            if changes:
                generator.configure(**changes)
            if request.speed is not None:
                generator.set_speed(request.speed)
        except ConfigurationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if request.reset:
            generator.reset(request.seed)
        await runner.start()
        return runner.status()

    @router.post("/stop")
    async def stop() -> dict[str, Any]:
        stopped = await runner.stop()
        return {**runner.status(), "stopped": stopped}

    return router
