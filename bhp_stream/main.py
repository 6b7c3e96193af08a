"""bhp-stream: streaming bottom-hole proppant concentration.

This is the application entry point.  It wires the StreamCoordinator,
the synthetic DataGenerator and the HTTP / WebSocket endpoints together.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI

from bhp_stream.api.rest import create_rest_router
from bhp_stream.api.simulation import create_simulation_router
from bhp_stream.api.ws_samples import create_samples_router
from bhp_stream.api.ws_stream import create_stream_router
from bhp_stream.config import settings
from bhp_stream.core.offset_policy import policy_for_mode
from bhp_stream.domain.config import BHPConfig
from bhp_stream.services.simulation_runner import SimulationRunner
from bhp_stream.simulation.config import config_for_pattern
from bhp_stream.simulation.service import DataGenerator
from bhp_stream.streaming.coordinator import StreamCoordinator

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

# ── Pipeline ─────────────────────────────────────────────────────────────────

coordinator = StreamCoordinator(
    policy=policy_for_mode(settings.offset_mode, settings.fixed_offset_tolerance_ms),
    config=BHPConfig(
        max_time_diff_seconds=settings.max_time_diff_seconds,
        max_offset_minutes=settings.max_offset_minutes,
        min_offset_minutes=settings.min_offset_minutes,
        window_size_seconds=settings.window_size_seconds,
    ),
    offset_parameter=settings.default_offset_parameter,
    ordering=settings.ordering_policy,
)

# ── Simulation ───────────────────────────────────────────────────────────────

runner = SimulationRunner(
    coordinator,
    DataGenerator(
        config_for_pattern(
            settings.simulation_pattern,
            seed=settings.simulation_seed,
            sampling_rate_hz=settings.simulation_sampling_rate_hz,
        )
    ),
)

# ── App ──────────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    await runner.stop()


app = FastAPI(
    lifespan=lifespan,
    title=settings.app_name,
    description="Streaming bottom-hole proppant concentration",
    version="0.1.0",
    debug=settings.debug,
)

# ── Routes ───────────────────────────────────────────────────────────────────

app.include_router(create_samples_router(coordinator))
app.include_router(create_stream_router(coordinator))
app.include_router(create_rest_router(coordinator))
app.include_router(create_simulation_router(runner))


# ── Health ───────────────────────────────────────────────────────────────────

@app.get("/health")
async def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "offset_mode": coordinator.mode.value,
        "offset_parameter": coordinator.offset_parameter.latest,
        "ordering": coordinator.state.window.ordering.value,
        "state": coordinator.state_stats().model_dump(),
        "simulation_running": runner.running,
        "stream_subscribers": coordinator.enhanced_samples.subscriber_count,
    }
