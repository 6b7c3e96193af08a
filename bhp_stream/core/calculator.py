"""BHPCalculator: backward-looking bottom-hole proppant concentration.

Algorithm:
    BHP(T) = surface concentration at (T - offset)

    1. Cache check (policies that cache only).
    2. The OffsetPolicy validates its prerequisites and resolves the offset,
       or stops early with a final value and a reason.
    3. historical_timestamp = T - offset_minutes * 60000
    4. Binary-search the window for the sample nearest to that timestamp.
    5. Reject it if it is further away than the policy's tolerance.
    6. BHP = that sample's concentration.  Cache it if the policy caches
       and T is not newer than the newest sample in the window.

Design principles:
    - Stateless apart from its BHPConfig: the result is a pure function of
      (target timestamp, state at call time) plus the cache write.
    - "Cannot determine yet" is a result with value None and an
      explanation, never an exception.  The per-sample path does not raise.
    - Config writes are validated before they are committed.
"""

from __future__ import annotations

import logging
from typing import Any

from bhp_stream.core.offset_policy import OffsetPolicy, RateDerivedOffsetPolicy
from bhp_stream.domain.config import DEFAULT_BHP_CONFIG, BHPConfig, build_config
from bhp_stream.domain.errors import ConfigurationError
from bhp_stream.domain.result import BHPCalculationResult, CalculationDetails
from bhp_stream.foundation.clock import MS_PER_MINUTE, MS_PER_SECOND
from bhp_stream.store.computation_state import ComputationState

logger = logging.getLogger(__name__)


class BHPCalculator:
    """Computes BHP for a target timestamp against a ComputationState.

    Args:
        policy: How the offset is resolved.  Defaults to the rate-derived
            (flush volume / rate) policy.
        config: Tolerances.  Defaults to DEFAULT_BHP_CONFIG.
    """

    def __init__(
        self,
        policy: OffsetPolicy | None = None,
        config: BHPConfig | None = None,
    ) -> None:
        self._policy: OffsetPolicy = policy or RateDerivedOffsetPolicy()
        self._config = config or DEFAULT_BHP_CONFIG

    @property
    def policy(self) -> OffsetPolicy:
        return self._policy

    # ── Calculation ──────────────────────────────────────────────────────

    def calculate(self, target_timestamp: int, state: ComputationState) -> BHPCalculationResult:
        """Calculate BHP for *target_timestamp*.

        Raises:
            ConfigurationError: If the state carries the other offset mode's
                parameter (a deployment mistake, not a data condition).
        """
        policy = self._policy
        if state.mode is not policy.mode:
            raise ConfigurationError(
                f"{policy!r} cannot run against a {state.mode.value} computation state"
            )

        if policy.caches_results:
            cached = state.get_cached_value(target_timestamp)
            if cached is not None:
                return BHPCalculationResult(
                    value=cached,
                    details=CalculationDetails(timestamp=target_timestamp, from_cache=True),
                )

        config = self._config
        resolution = policy.resolve(target_timestamp, state, config)
        details: dict[str, Any] = {
            "timestamp": target_timestamp,
            "offset_minutes": resolution.offset_minutes,
            "reference_rate": resolution.reference_rate,
        }
        if resolution.stopped:
            return self._finish(resolution.value, details, resolution.error_message)

        offset_ms = resolution.offset_minutes * MS_PER_MINUTE
        historical_ts = target_timestamp - offset_ms
        details["offset_milliseconds"] = offset_ms
        details["historical_timestamp"] = historical_ts

        match = state.window.find_nearest(historical_ts)
        if match.sample is None:
            return self._finish(None, details, "no historical data point found in window")

        time_diff_s = match.time_diff_ms / MS_PER_SECOND
        details["historical_sample"] = match.sample
        details["time_difference_seconds"] = time_diff_s

        tolerance = policy.tolerance_seconds(config)
        if time_diff_s > tolerance:
            return self._finish(
                None, details, policy.out_of_tolerance_message(time_diff_s, tolerance)
            )

        value = match.sample.concentration
        # Targets past the newest sample may still get their own sample later.
        newest = state.window.newest()
        if policy.caches_results and target_timestamp <= newest.timestamp:
            state.cache_value(target_timestamp, value)
        return self._finish(value, details)

    @staticmethod
    def _finish(
        value: float | None, details: dict[str, Any], error_message: str | None = None
    ) -> BHPCalculationResult:
        if error_message is not None:
            logger.debug("BHP at %d -> %s (%s)", details["timestamp"], value, error_message)
        return BHPCalculationResult(
            value=value,
            details=CalculationDetails(error_message=error_message, **details),
        )

    # ── Configuration ────────────────────────────────────────────────────

    def update_config(self, **changes: Any) -> BHPConfig:
        """Merge *changes* into the current config after validating the result."""
        self._config = self._config.merged(**changes)
        logger.info("BHP config updated: %s", changes)
        return self._config

    def get_config(self) -> BHPConfig:
        # Frozen model: handing out the instance is handing out a copy.
        return self._config

    def set_config(self, config: BHPConfig | dict[str, Any]) -> BHPConfig:
        """Replace the whole config.  Dicts must be complete or rely on defaults."""
        data = config.model_dump() if isinstance(config, BHPConfig) else dict(config)
        self._config = build_config(data)
        logger.info("BHP config replaced: %s", self._config.model_dump())
        return self._config

    def reset_config(self) -> BHPConfig:
        self._config = DEFAULT_BHP_CONFIG
        logger.info("BHP config reset to defaults")
        return self._config
