"""ComputationState: everything the calculator needs between samples.

Owns exactly one TimeWindow, one result cache keyed by target timestamp, and
one offset parameter whose meaning depends on the deployment's OffsetMode:

    - RATE_DERIVED: flush volume in barrels
    - FIXED:        offset in minutes

Cache coherence:
    A cache entry never outlives the sample it was computed for.  Evictions
    reported by the window are purged inside the same add_sample() call.
    A sample inserted out of order (OrderingPolicy.SORT) can change the
    nearest neighbour of any earlier lookup, so the whole cache is dropped.

Thread-safety note:
    The state is mutated by a single ingestion path only.  Read accessors
    return copies so concurrent readers never see a torn update.
"""

from __future__ import annotations

import logging
import math

from bhp_stream.domain.enums import OffsetMode, OrderingPolicy
from bhp_stream.domain.errors import ConfigurationError
from bhp_stream.domain.sample import Sample
from bhp_stream.domain.stats import StateStats
from bhp_stream.foundation.clock import MS_PER_MINUTE
from bhp_stream.store.time_window import DEFAULT_WINDOW_SIZE_SECONDS, TimeWindow

logger = logging.getLogger(__name__)


class ComputationState:
    """Sliding window + BHP cache + offset parameter.

    Args:
        mode: Which offset parameter this state carries.
        window_size_seconds: Retention period for the window.
        ordering: Policy for samples that arrive out of order.
    """

    def __init__(
        self,
        mode: OffsetMode = OffsetMode.RATE_DERIVED,
        window_size_seconds: float = DEFAULT_WINDOW_SIZE_SECONDS,
        ordering: OrderingPolicy = OrderingPolicy.REJECT,
    ) -> None:
        self._mode = mode
        self._window = TimeWindow(window_size_seconds, ordering)
        self._cache: dict[int, float] = {}
        self._offset_parameter: float | None = None

    # ── Samples ──────────────────────────────────────────────────────────

    def add_sample(self, sample: Sample) -> list[Sample]:
        """Insert *sample* into the window and purge cache entries of evictions.

        Returns the evicted samples.  If the window rejects the sample
        (OutOfOrderSampleError) neither window nor cache is touched.
        """
        newest = self._window.newest()
        late = newest is not None and sample.timestamp < newest.timestamp
        evicted = self._window.add(sample)
        if late:
            self._cache.clear()
        self._purge(evicted)
        return evicted

    def resize_window(self, window_size_seconds: float) -> list[Sample]:
        evicted = self._window.resize(window_size_seconds)
        self._purge(evicted)
        return evicted

    def get_window_samples(self) -> list[Sample]:
        return self._window.samples()

    @property
    def window(self) -> TimeWindow:
        """The backing window, for lookups.  Mutate only through this state."""
        return self._window

    @property
    def mode(self) -> OffsetMode:
        return self._mode

    # ── Offset parameter ─────────────────────────────────────────────────

    def set_flush_volume(self, volume: float) -> None:
        """Set the wellbore flush volume in barrels (rate-derived mode)."""
        self._require_mode(OffsetMode.RATE_DERIVED, "flush volume")
        self._set_offset_parameter(volume, "flush volume")

    def get_flush_volume(self) -> float | None:
        self._require_mode(OffsetMode.RATE_DERIVED, "flush volume")
        return self._offset_parameter

    def set_offset_minutes(self, minutes: float) -> None:
        """Set the travel-time offset directly (fixed mode)."""
        self._require_mode(OffsetMode.FIXED, "offset minutes")
        self._set_offset_parameter(minutes, "offset minutes")

    def get_offset_minutes(self) -> float | None:
        self._require_mode(OffsetMode.FIXED, "offset minutes")
        return self._offset_parameter

    @property
    def offset_parameter(self) -> float | None:
        """The mode-specific offset parameter, whichever it is."""
        return self._offset_parameter

    # ── Cache ────────────────────────────────────────────────────────────

    def get_cached_value(self, timestamp: int) -> float | None:
        return self._cache.get(timestamp)

    def cache_value(self, timestamp: int, value: float) -> None:
        self._cache[timestamp] = value

    def has_cached(self, timestamp: int) -> bool:
        return timestamp in self._cache

    def invalidate_cache(self) -> None:
        """Drop every cached value (inputs to past calculations changed)."""
        if self._cache:
            logger.debug("Invalidated %d cached BHP value(s)", len(self._cache))
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # ── Observability ────────────────────────────────────────────────────

    def stats(self) -> StateStats:
        window = self._window.stats()
        return StateStats(
            window_size=window.size,
            cache_size=len(self._cache),
            window_start_timestamp=window.oldest_timestamp,
            window_end_timestamp=window.newest_timestamp,
            window_duration_minutes=window.duration_seconds * 1000 / MS_PER_MINUTE,
        )

    def clear(self) -> None:
        """Empty window and cache and unset the offset parameter."""
        self._window.clear()
        self._cache.clear()
        self._offset_parameter = None

    # ── Internals ────────────────────────────────────────────────────────

    def _purge(self, evicted: list[Sample]) -> None:
        for sample in evicted:
            self._cache.pop(sample.timestamp, None)
        # What-if queries may cache targets with no backing sample.
        if evicted and len(self._cache) > len(self._window):
            oldest = self._window.oldest()
            if oldest is None:
                self._cache.clear()
            else:
                for ts in [ts for ts in self._cache if ts < oldest.timestamp]:
                    del self._cache[ts]

    def _require_mode(self, mode: OffsetMode, name: str) -> None:
        if self._mode is not mode:
            raise ConfigurationError(
                f"{name} is not available in {self._mode.value} offset mode"
            )

    def _set_offset_parameter(self, value: float, name: str) -> None:
        if math.isnan(value) or value < 0:
            raise ConfigurationError(f"{name} must be non-negative, got {value}")
        if value != self._offset_parameter:
            # Cached values were derived from the previous parameter.
            self._cache.clear()
        self._offset_parameter = float(value)

    def __repr__(self) -> str:
        return (
            f"ComputationState(mode={self._mode.value}, "
            f"window={len(self._window)}, cache={len(self._cache)}, "
            f"offset_parameter={self._offset_parameter})"
        )
