"""Synthetic data generator configuration.

Every pattern has its own defaults (DEFAULT_CONFIGS); GeneratorConfig
validates ranges and limit ordering on construction.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from bhp_stream.domain.errors import ConfigurationError

Limits = tuple[float, float]


class DataPattern(str, Enum):
    """Shapes of synthetic surface data."""

    STEADY = "steady"
    RAMPING = "ramping"
    CYCLING = "cycling"
    REALISTIC = "realistic"
    PUMP_STOP = "pump_stop"
    STAGE_TRANSITION = "stage_transition"


class GeneratorConfig(BaseModel):
    sampling_rate_hz: float = Field(1.0, gt=0.0, le=10.0, description="Samples per second")
    pattern: DataPattern = DataPattern.REALISTIC
    base_rate: float = Field(15.0, ge=0.0, description="bbl/min")
    rate_limits: Limits = (5.0, 30.0)
    base_pressure: float = Field(5000.0, ge=0.0, description="psi")
    pressure_limits: Limits = (2000.0, 8000.0)
    base_concentration: float = Field(2.5, ge=0.0, description="lb/gal")
    concentration_limits: Limits = (0.0, 15.0)
    noise_level: float = Field(0.1, ge=0.0, le=1.0, description="Noise amplitude multiplier")
    seed: Optional[int] = Field(None, description="None seeds from the clock")
    normalize_timestamp_to_seconds: bool = Field(
        False, description="Floor generated timestamps to whole seconds"
    )

    model_config = {"frozen": True, "extra": "forbid"}

    @model_validator(mode="after")
    def check_limits(self) -> GeneratorConfig:
        for name in ("rate_limits", "pressure_limits", "concentration_limits"):
            low, high = getattr(self, name)
            if low > high:
                raise ValueError(f"{name} min must be <= max")
        return self

    def merged(self, **changes: Any) -> GeneratorConfig:
        return build_generator_config({**self.model_dump(), **changes})


DEFAULT_CONFIGS: dict[DataPattern, dict[str, Any]] = {
    DataPattern.STEADY: {
        "sampling_rate_hz": 0.5,
        "base_rate": 20.0,
        "rate_limits": (19.0, 21.0),
        "base_pressure": 5000.0,
        "pressure_limits": (4800.0, 5200.0),
        "base_concentration": 2.5,
        "concentration_limits": (2.3, 2.7),
        "noise_level": 0.05,
    },
    DataPattern.RAMPING: {
        "sampling_rate_hz": 1.0,
        "base_rate": 15.0,
        "rate_limits": (5.0, 30.0),
        "base_pressure": 5000.0,
        "pressure_limits": (2000.0, 8000.0),
        "base_concentration": 2.5,
        "concentration_limits": (0.0, 15.0),
        "noise_level": 0.1,
    },
    DataPattern.CYCLING: {
        "sampling_rate_hz": 2.0,
        "base_rate": 20.0,
        "rate_limits": (10.0, 30.0),
        "base_pressure": 5500.0,
        "pressure_limits": (3000.0, 8000.0),
        "base_concentration": 5.0,
        "concentration_limits": (2.0, 10.0),
        "noise_level": 0.15,
    },
    DataPattern.REALISTIC: {
        "sampling_rate_hz": 1.0,
        "base_rate": 15.0,
        "rate_limits": (5.0, 30.0),
        "base_pressure": 5000.0,
        "pressure_limits": (2000.0, 8000.0),
        "base_concentration": 2.5,
        "concentration_limits": (0.0, 15.0),
        "noise_level": 0.15,
    },
    DataPattern.PUMP_STOP: {
        "sampling_rate_hz": 1.0,
        "base_rate": 20.0,
        "rate_limits": (0.0, 30.0),
        "base_pressure": 5000.0,
        "pressure_limits": (1000.0, 8000.0),
        "base_concentration": 3.0,
        "concentration_limits": (0.0, 10.0),
        "noise_level": 0.1,
    },
    DataPattern.STAGE_TRANSITION: {
        "sampling_rate_hz": 1.0,
        "base_rate": 18.0,
        "rate_limits": (5.0, 30.0),
        "base_pressure": 5000.0,
        "pressure_limits": (2000.0, 8000.0),
        "base_concentration": 4.0,
        "concentration_limits": (0.0, 15.0),
        "noise_level": 0.12,
    },
}


def build_generator_config(data: dict[str, Any]) -> GeneratorConfig:
    """Validate *data* into a GeneratorConfig, raising ConfigurationError on failure."""
    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as exc:
        reasons = "; ".join(err["msg"] for err in exc.errors())
        raise ConfigurationError(f"invalid generator config: {reasons}") from exc


def config_for_pattern(pattern: DataPattern, **overrides: Any) -> GeneratorConfig:
    """Pattern defaults with *overrides* applied."""
    return build_generator_config({**DEFAULT_CONFIGS[pattern], "pattern": pattern, **overrides})
