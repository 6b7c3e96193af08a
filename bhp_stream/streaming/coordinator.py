"""StreamCoordinator: the incremental BHP pipeline.

    Sample → ingest() → ComputationState.add_sample()  (window + eviction + cache purge)
                      → BHPCalculator.calculate()
                      → EnhancedSample → enhanced_samples channel
                      → StateStats     → stats channel

Ordering:
    Exactly one EnhancedSample is published per ingested sample, in
    ingestion order.  ingest() runs to completion before returning; callers
    in multi-threaded or async hosts must serialise calls (single writer).

Failure isolation:
    A sample rejected by the window (OutOfOrderSampleError) propagates to
    the caller before anything is mutated or published.  Subscriber
    failures are contained by the channels.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from bhp_stream.core.calculator import BHPCalculator
from bhp_stream.core.offset_policy import OffsetPolicy, RateDerivedOffsetPolicy
from bhp_stream.domain.config import BHPConfig
from bhp_stream.domain.enhanced import EnhancedSample
from bhp_stream.domain.enums import OffsetMode, OrderingPolicy
from bhp_stream.domain.errors import ConfigurationError
from bhp_stream.domain.result import BHPCalculationResult
from bhp_stream.domain.sample import Sample
from bhp_stream.domain.stats import StateStats
from bhp_stream.store.computation_state import ComputationState
from bhp_stream.streaming.channel import ReplayChannel

logger = logging.getLogger(__name__)

DEFAULT_FLUSH_VOLUME_BBL = 120.0
DEFAULT_OFFSET_MINUTES = 3.0


def default_offset_parameter(mode: OffsetMode) -> float:
    if mode is OffsetMode.RATE_DERIVED:
        return DEFAULT_FLUSH_VOLUME_BBL
    return DEFAULT_OFFSET_MINUTES


class StreamCoordinator:
    """Owns one ComputationState and one BHPCalculator and drives them.

    Args:
        policy: Offset policy; its mode decides which offset parameter the
            coordinator manages.
        config: Initial calculator tolerances (window size included).
        offset_parameter: Initial flush volume (bbl) or offset (minutes).
            Defaults to 120 bbl / 3 min depending on the policy's mode.
        ordering: Policy for out-of-order samples.
    """

    def __init__(
        self,
        policy: OffsetPolicy | None = None,
        config: BHPConfig | None = None,
        offset_parameter: float | None = None,
        ordering: OrderingPolicy = OrderingPolicy.REJECT,
    ) -> None:
        self._calculator = BHPCalculator(policy or RateDerivedOffsetPolicy(), config)
        self._mode = self._calculator.policy.mode
        self._state = ComputationState(
            mode=self._mode,
            window_size_seconds=self._calculator.get_config().window_size_seconds,
            ordering=ordering,
        )

        self.enhanced_samples: ReplayChannel[EnhancedSample] = ReplayChannel("enhanced_samples")
        self.stats: ReplayChannel[StateStats] = ReplayChannel("stats")
        self.offset_parameter: ReplayChannel[float] = ReplayChannel("offset_parameter")
        self.config: ReplayChannel[BHPConfig] = ReplayChannel(
            "config", self._calculator.get_config()
        )

        if offset_parameter is None:
            offset_parameter = default_offset_parameter(self._mode)
        self.set_offset_parameter(offset_parameter)

    # ── Ingestion ────────────────────────────────────────────────────────

    def ingest(self, sample: Sample) -> EnhancedSample:
        """Add *sample*, compute its BHP and publish the enhanced sample."""
        self._state.add_sample(sample)
        result = self._calculator.calculate(sample.timestamp, self._state)
        enhanced = EnhancedSample.from_result(sample, result)
        logger.debug(
            "Ingested sample %d (rate=%s, conc=%s) → bhp=%s",
            sample.timestamp,
            sample.rate,
            sample.concentration,
            enhanced.bhp,
        )
        self.enhanced_samples.publish(enhanced)
        self.stats.publish(self._state.stats())
        return enhanced

    def ingest_many(self, samples: Iterable[Sample]) -> list[EnhancedSample]:
        """Ingest an ordered batch, one sample at a time."""
        return [self.ingest(sample) for sample in samples]

    def compute_synchronously(self, timestamp: int) -> BHPCalculationResult:
        """What-if query against the current state.  Publishes nothing."""
        return self._calculator.calculate(timestamp, self._state)

    def reset(self) -> None:
        """Clear window and cache.  Config and the offset parameter survive."""
        current = self.offset_parameter.latest
        self._state.clear()
        if current is not None:
            self._set_state_parameter(current)
        self.stats.publish(self._state.stats())
        logger.info("Computation state reset")

    # ── Offset parameter ─────────────────────────────────────────────────

    @property
    def mode(self) -> OffsetMode:
        return self._mode

    def set_offset_parameter(self, value: float) -> None:
        """Set flush volume (rate-derived) or offset minutes (fixed).

        Raises:
            ConfigurationError: Flush volume must be > 0; offset minutes >= 0.
        """
        if self._mode is OffsetMode.RATE_DERIVED:
            if not value > 0:
                raise ConfigurationError(f"flush volume must be positive, got {value}")
        elif not value >= 0:
            raise ConfigurationError(f"offset time must be non-negative, got {value}")
        self._set_state_parameter(value)
        self.offset_parameter.publish(float(value))
        logger.info("Offset parameter (%s) set to %s", self._mode.value, value)

    def set_flush_volume(self, volume: float) -> None:
        self._require_mode(OffsetMode.RATE_DERIVED, "flush volume")
        self.set_offset_parameter(volume)

    def get_flush_volume(self) -> float | None:
        self._require_mode(OffsetMode.RATE_DERIVED, "flush volume")
        return self.offset_parameter.latest

    def set_offset_minutes(self, minutes: float) -> None:
        self._require_mode(OffsetMode.FIXED, "offset minutes")
        self.set_offset_parameter(minutes)

    def get_offset_minutes(self) -> float | None:
        self._require_mode(OffsetMode.FIXED, "offset minutes")
        return self.offset_parameter.latest

    # ── Configuration ────────────────────────────────────────────────────

    def get_config(self) -> BHPConfig:
        return self._calculator.get_config()

    def update_config(self, **changes: Any) -> BHPConfig:
        return self._apply_config(self._calculator.update_config(**changes))

    def set_config(self, config: BHPConfig | dict[str, Any]) -> BHPConfig:
        return self._apply_config(self._calculator.set_config(config))

    def reset_config(self) -> BHPConfig:
        return self._apply_config(self._calculator.reset_config())

    # ── Observability ────────────────────────────────────────────────────

    def state_stats(self) -> StateStats:
        return self._state.stats()

    @property
    def state(self) -> ComputationState:
        """The live state, for read-only inspection."""
        return self._state

    # ── Internals ────────────────────────────────────────────────────────

    def _apply_config(self, config: BHPConfig) -> BHPConfig:
        # Tolerances changed, so earlier results may no longer hold.
        self._state.invalidate_cache()
        if config.window_size_seconds != self._state.window.window_size_seconds:
            evicted = self._state.resize_window(config.window_size_seconds)
            if evicted:
                logger.info("Window resize evicted %d sample(s)", len(evicted))
        self.config.publish(config)
        self.stats.publish(self._state.stats())
        return config

    def _set_state_parameter(self, value: float) -> None:
        if self._mode is OffsetMode.RATE_DERIVED:
            self._state.set_flush_volume(value)
        else:
            self._state.set_offset_minutes(value)

    def _require_mode(self, mode: OffsetMode, name: str) -> None:
        if self._mode is not mode:
            raise ConfigurationError(
                f"{name} is not available in {self._mode.value} offset mode"
            )

    def __repr__(self) -> str:
        return (
            f"StreamCoordinator(mode={self._mode.value}, "
            f"offset_parameter={self.offset_parameter.latest}, state={self._state!r})"
        )
