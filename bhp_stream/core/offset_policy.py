"""Offset policies: how the travel-time offset is resolved for a target time.

The calculator depends on this protocol; swap implementations to change how
the offset is derived without touching the lookup logic.

    RateDerivedOffsetPolicy   offset = flush volume / reference pump rate,
                              bounded by BHPConfig, results cached.
    FixedOffsetPolicy         offset entered directly in minutes, accepted
                              within a fixed tolerance, never cached.

A policy either resolves an offset or stops the calculation early with a
final value (None for pending, 0.0 for a stopped pump) and a reason.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

from bhp_stream.domain.config import BHPConfig
from bhp_stream.domain.enums import OffsetMode
from bhp_stream.domain.sample import Sample
from bhp_stream.foundation.clock import MS_PER_SECOND
from bhp_stream.store.computation_state import ComputationState
from bhp_stream.store.time_window import TimeWindow

DEFAULT_FIXED_TOLERANCE_MS = 60_000.0


@dataclass(frozen=True)
class OffsetResolution:
    """What a policy decided before the historical lookup."""

    offset_minutes: float = 0.0
    reference_rate: float = 0.0
    stopped: bool = False
    value: float | None = None
    error_message: str | None = None

    @classmethod
    def proceed(cls, offset_minutes: float, reference_rate: float = 0.0) -> OffsetResolution:
        return cls(offset_minutes=offset_minutes, reference_rate=reference_rate)

    @classmethod
    def stop(
        cls,
        value: float | None,
        error_message: str,
        offset_minutes: float = 0.0,
        reference_rate: float = 0.0,
    ) -> OffsetResolution:
        return cls(
            offset_minutes=offset_minutes,
            reference_rate=reference_rate,
            stopped=True,
            value=value,
            error_message=error_message,
        )


class OffsetPolicy(Protocol):
    """Protocol for resolving the offset used by BHPCalculator."""

    mode: OffsetMode
    caches_results: bool

    def resolve(
        self, target_timestamp: int, state: ComputationState, config: BHPConfig
    ) -> OffsetResolution:
        """Decide the offset for *target_timestamp*, or stop early."""
        ...

    def tolerance_seconds(self, config: BHPConfig) -> float:
        """Largest acceptable gap between ideal and found historical sample."""
        ...

    def out_of_tolerance_message(self, time_diff_seconds: float, tolerance: float) -> str:
        ...


class RateDerivedOffsetPolicy:
    """Offset from flush volume and the pump rate observed near the target.

    A reference rate of zero (or a non-finite one) means the pump is
    stopped; BHP is then definitionally 0.0 rather than pending.
    """

    mode = OffsetMode.RATE_DERIVED
    caches_results = True
    min_samples = 2

    def resolve(
        self, target_timestamp: int, state: ComputationState, config: BHPConfig
    ) -> OffsetResolution:
        flush_volume = state.get_flush_volume()
        if flush_volume is None or not flush_volume > 0:
            return OffsetResolution.stop(None, "flush volume not set or invalid")

        window = state.window
        if window.size() < self.min_samples:
            return OffsetResolution.stop(
                None, f"insufficient data points in window (need at least {self.min_samples})"
            )

        reference = reference_sample(window, target_timestamp)
        rate = reference.rate if reference is not None else 0.0
        if not math.isfinite(rate) or rate <= 0:
            return OffsetResolution.stop(
                0.0, "invalid reference rate (must be > 0)", reference_rate=rate
            )

        offset_minutes = flush_volume / rate
        if not config.min_offset_minutes <= offset_minutes <= config.max_offset_minutes:
            return OffsetResolution.stop(
                0.0,
                f"offset out of valid range ({config.min_offset_minutes} - "
                f"{config.max_offset_minutes} min)",
                offset_minutes=offset_minutes,
                reference_rate=rate,
            )

        return OffsetResolution.proceed(offset_minutes, reference_rate=rate)

    def tolerance_seconds(self, config: BHPConfig) -> float:
        return config.max_time_diff_seconds

    def out_of_tolerance_message(self, time_diff_seconds: float, tolerance: float) -> str:
        return f"historical point too far ({time_diff_seconds:.1f}s > {tolerance:g}s)"

    def __repr__(self) -> str:
        return "RateDerivedOffsetPolicy()"


class FixedOffsetPolicy:
    """Offset entered directly in minutes; no dependency on pump rate.

    Args:
        tolerance_ms: How far the nearest sample may sit from the ideal
            historical timestamp before the result is reported as pending.
    """

    mode = OffsetMode.FIXED
    caches_results = False

    def __init__(self, tolerance_ms: float = DEFAULT_FIXED_TOLERANCE_MS) -> None:
        if not tolerance_ms >= 0:
            raise ValueError("tolerance_ms must be non-negative")
        self.tolerance_ms = float(tolerance_ms)

    def resolve(
        self, target_timestamp: int, state: ComputationState, config: BHPConfig
    ) -> OffsetResolution:
        offset_minutes = state.get_offset_minutes()
        if offset_minutes is None or not offset_minutes >= 0:
            return OffsetResolution.stop(None, "offset time not set or invalid")

        if state.window.is_empty():
            return OffsetResolution.stop(None, "no data points in window")

        return OffsetResolution.proceed(offset_minutes)

    def tolerance_seconds(self, config: BHPConfig) -> float:
        return self.tolerance_ms / MS_PER_SECOND

    def out_of_tolerance_message(self, time_diff_seconds: float, tolerance: float) -> str:
        return "waiting for data history (offset time not yet reached)"

    def __repr__(self) -> str:
        return f"FixedOffsetPolicy(tolerance_ms={self.tolerance_ms:g})"


def reference_sample(window: TimeWindow, target_timestamp: int) -> Sample | None:
    """Sample whose rate drives the offset for *target_timestamp*.

    Prefers an exact timestamp match, then the latest sample at or before the
    target, and finally the newest sample when the target predates the window.
    """
    exact = window.find_exact(target_timestamp)
    if exact is not None:
        return exact
    before = window.latest_at_or_before(target_timestamp)
    if before is not None:
        return before
    return window.newest()


def policy_for_mode(
    mode: OffsetMode, tolerance_ms: float = DEFAULT_FIXED_TOLERANCE_MS
) -> OffsetPolicy:
    if mode is OffsetMode.RATE_DERIVED:
        return RateDerivedOffsetPolicy()
    return FixedOffsetPolicy(tolerance_ms=tolerance_ms)
