"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings

from bhp_stream.domain.enums import OffsetMode, OrderingPolicy
from bhp_stream.simulation.config import DataPattern


class Settings(BaseSettings):
    app_name: str = "bhp-stream"
    debug: bool = False
    log_level: str = "INFO"

    # Offset determination
    offset_mode: OffsetMode = OffsetMode.RATE_DERIVED
    default_flush_volume_bbl: float = 120.0
    default_offset_minutes: float = 3.0
    fixed_offset_tolerance_ms: float = 60_000.0
    ordering_policy: OrderingPolicy = OrderingPolicy.REJECT

    # Calculator tolerances (initial BHPConfig)
    max_time_diff_seconds: float = 60.0
    max_offset_minutes: float = 120.0
    min_offset_minutes: float = 0.0167
    window_size_seconds: float = 7200.0

    # Synthetic data
    simulation_pattern: DataPattern = DataPattern.REALISTIC
    simulation_seed: int | None = None
    simulation_sampling_rate_hz: float = 1.0

    model_config = {"env_prefix": "BHP_"}

    @property
    def default_offset_parameter(self) -> float:
        if self.offset_mode is OffsetMode.RATE_DERIVED:
            return self.default_flush_volume_bbl
        return self.default_offset_minutes


settings = Settings()
