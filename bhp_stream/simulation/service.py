"""DataGenerator: turns a pattern generator into timestamped Samples.

The generator keeps a simulated clock (elapsed seconds) that advances by one
sampling interval times the speed multiplier per sample.  Timestamps come
from the wall clock unless the caller supplies them, so the same instance
serves both a live feed and offline batch generation.

Generated values that fail range validation are sanitized into the
configured limits rather than dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from bhp_stream.domain.errors import ConfigurationError
from bhp_stream.domain.sample import Sample
from bhp_stream.foundation.clock import MS_PER_SECOND, now_ms
from bhp_stream.simulation.config import GeneratorConfig, config_for_pattern
from bhp_stream.simulation.generators import BaseGenerator, create_generator
from bhp_stream.simulation.validators import (
    sanitize_number,
    validate_sample_values,
    validate_timestamp,
)

logger = logging.getLogger(__name__)

MAX_SPEED = 10.0


class DataGenerator:
    """Stateful synthetic sample source.

    Args:
        config: Initial generator config.  Defaults to the realistic
            pattern's defaults.
    """

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        self._config = config or config_for_pattern(GeneratorConfig().pattern)
        self._generator: BaseGenerator = create_generator(self._config)
        self._speed = 1.0
        self._elapsed = 0.0
        self._running = False

    # ── Configuration ────────────────────────────────────────────────────

    def configure(self, **changes: Any) -> GeneratorConfig:
        """Merge *changes* into the config; a new pattern swaps the generator.

        Raises:
            ConfigurationError: If the merged config is invalid.
        """
        new_config = self._config.merged(**changes)
        if new_config.pattern != self._config.pattern:
            self._generator = create_generator(new_config)
        else:
            self._generator.update_config(**changes)
        self._config = new_config
        logger.info("Generator configured: %s", changes)
        return new_config

    def get_config(self) -> GeneratorConfig:
        return self._config

    def set_speed(self, multiplier: float) -> None:
        if not 0 < multiplier <= MAX_SPEED:
            raise ConfigurationError(f"speed multiplier must be in (0, {MAX_SPEED:g}]")
        self._speed = float(multiplier)

    def get_speed(self) -> float:
        return self._speed

    @property
    def interval_seconds(self) -> float:
        return 1.0 / self._config.sampling_rate_hz

    # ── Lifecycle ────────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> bool:
        """Mark the generator running.  Returns False if it already was."""
        if self._running:
            logger.warning("Generator is already running")
            return False
        self._elapsed = 0.0
        self._running = True
        return True

    def stop(self) -> None:
        self._running = False

    def reset(self, seed: int | None = None) -> None:
        """Stop, rewind the simulated clock and reseed."""
        self.stop()
        self._elapsed = 0.0
        if seed is not None:
            self._config = self._config.merged(seed=seed)
        self._generator.reset(seed)

    def elapsed_seconds(self) -> float:
        return self._elapsed

    # ── Generation ───────────────────────────────────────────────────────

    def next_sample(self, timestamp: int | None = None) -> Sample:
        """Advance the simulated clock one interval and emit a sample.

        Raises:
            ValueError: If an explicit *timestamp* is negative or not a number.
        """
        if timestamp is None:
            timestamp = now_ms()
        else:
            check = validate_timestamp(timestamp)
            if not check.valid:
                raise ValueError("; ".join(check.errors))
        if self._config.normalize_timestamp_to_seconds:
            timestamp = (timestamp // MS_PER_SECOND) * MS_PER_SECOND
        self._elapsed += self.interval_seconds * self._speed

        values = self._generator.generate(self._elapsed)
        rate, concentration, pressure = values
        check = validate_sample_values(rate, concentration, pressure)
        if not check.valid:
            logger.warning("Generated invalid data, sanitizing: %s", check.errors)
            c = self._config
            rate = sanitize_number(rate, *c.rate_limits, c.base_rate)
            concentration = sanitize_number(
                concentration, *c.concentration_limits, c.base_concentration
            )
            pressure = sanitize_number(pressure, *c.pressure_limits, c.base_pressure)

        return Sample(
            timestamp=timestamp, rate=rate, concentration=concentration, pressure=pressure
        )

    def generate(self, count: int, start_timestamp: int) -> Iterator[Sample]:
        """Offline batch: *count* samples spaced one interval apart."""
        step_ms = self.interval_seconds * MS_PER_SECOND
        for i in range(count):
            yield self.next_sample(int(start_timestamp + i * step_ms))

    def __repr__(self) -> str:
        return (
            f"DataGenerator(pattern={self._config.pattern.value}, "
            f"speed={self._speed:g}, elapsed={self._elapsed:.1f}s)"
        )
