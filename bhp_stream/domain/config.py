"""BHPConfig: runtime-tunable tolerances for the calculator.

Validated on every write.  Invalid values are never clamped: the write is
rejected with ConfigurationError and the previous config stays in effect.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from bhp_stream.domain.errors import ConfigurationError


class BHPConfig(BaseModel):
    max_time_diff_seconds: float = Field(
        60.0, description="Largest accepted gap between the ideal and the used historical sample"
    )
    max_offset_minutes: float = Field(120.0, description="Upper bound for a derived offset")
    min_offset_minutes: float = Field(0.0167, description="Lower bound for a derived offset (~1 s)")
    window_size_seconds: float = Field(7200.0, description="History retained by the window")

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}

    @model_validator(mode="after")
    def check_bounds(self) -> BHPConfig:
        if self.max_time_diff_seconds <= 0:
            raise ValueError("max_time_diff_seconds must be positive")
        if self.max_offset_minutes <= 0:
            raise ValueError("max_offset_minutes must be positive")
        if self.min_offset_minutes < 0:
            raise ValueError("min_offset_minutes must be non-negative")
        if self.min_offset_minutes >= self.max_offset_minutes:
            raise ValueError("min_offset_minutes must be less than max_offset_minutes")
        if self.window_size_seconds <= 0:
            raise ValueError("window_size_seconds must be positive")
        return self

    def merged(self, **changes: Any) -> BHPConfig:
        """Return a validated copy with *changes* applied."""
        return build_config({**self.model_dump(), **changes})


DEFAULT_BHP_CONFIG = BHPConfig()


def build_config(data: dict[str, Any]) -> BHPConfig:
    """Validate *data* into a BHPConfig, raising ConfigurationError on failure."""
    try:
        return BHPConfig.model_validate(data)
    except ValidationError as exc:
        reasons = "; ".join(err["msg"] for err in exc.errors())
        raise ConfigurationError(f"invalid BHP config: {reasons}") from exc
