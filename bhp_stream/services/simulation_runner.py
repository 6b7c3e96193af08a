"""SimulationRunner: feeds a StreamCoordinator from a DataGenerator.

One asyncio task emits a sample every sampling interval and ingests it.
Ingestion is synchronous and runs on the event loop, so it never
interleaves with samples arriving over /ws/samples.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from bhp_stream.domain.errors import OutOfOrderSampleError
from bhp_stream.simulation.service import DataGenerator
from bhp_stream.streaming.coordinator import StreamCoordinator

logger = logging.getLogger(__name__)


class SimulationRunner:
    """Owns the background task that drives the coordinator with synthetic data."""

    def __init__(self, coordinator: StreamCoordinator, generator: DataGenerator) -> None:
        self._coordinator = coordinator
        self._generator = generator
        self._task: asyncio.Task | None = None
        self._emitted = 0
        self._rejected = 0
        self._error: str | None = None

    @property
    def generator(self) -> DataGenerator:
        return self._generator

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> bool:
        """Start emitting.  Returns False if a run is already in progress."""
        if self.running:
            return False
        if self._task is not None and not self._task.cancelled():
            self._task.exception()
        self._error = None
        self._generator.start()
        self._task = asyncio.create_task(self._run(), name="bhp-simulation")
        logger.info("Simulation started: %r", self._generator)
        return True

    async def stop(self) -> bool:
        """Cancel the task and wait for it.  Returns False if nothing was running."""
        task, self._task = self._task, None
        self._generator.stop()
        if task is None:
            return False
        if task.done():
            if not task.cancelled():
                # Already logged by _run; retrieve it so asyncio stays quiet.
                task.exception()
            return False
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Simulation stopped after %d sample(s)", self._emitted)
        return True

    def status(self) -> dict[str, Any]:
        config = self._generator.get_config()
        return {
            "running": self.running,
            "pattern": config.pattern.value,
            "sampling_rate_hz": config.sampling_rate_hz,
            "speed": self._generator.get_speed(),
            "elapsed_seconds": self._generator.elapsed_seconds(),
            "emitted": self._emitted,
            "rejected": self._rejected,
            "error": self._error,
        }

    async def _run(self) -> None:
        try:
            while True:
                sample = self._generator.next_sample()
                try:
                    self._coordinator.ingest(sample)
                    self._emitted += 1
                except OutOfOrderSampleError as exc:
                    # Wall clock stepped backwards; skip the sample.
                    self._rejected += 1
                    logger.warning("Simulated sample rejected: %s", exc)
                await asyncio.sleep(self._generator.interval_seconds)
        except Exception as exc:
            self._error = str(exc) or type(exc).__name__
            self._generator.stop()
            logger.exception("Simulation task failed after %d sample(s)", self._emitted)
            raise
