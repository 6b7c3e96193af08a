"""Range checks for producer-side sample validation.

The core engine accepts any number; these checks keep synthetic (or
instrument) producers honest before samples are ingested.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

RATE_RANGE = (0.0, 100.0)
CONCENTRATION_RANGE = (0.0, 20.0)
PRESSURE_RANGE = (0.0, 15000.0)


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def extend(self, other: ValidationResult) -> None:
        self.errors.extend(other.errors)


def validate_number(
    value: float,
    name: str,
    minimum: float | None = None,
    maximum: float | None = None,
) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(value, (int, float)) or isinstance(value, bool) or math.isnan(value):
        result.errors.append(f"{name} must be a valid number")
    elif not math.isfinite(value):
        result.errors.append(f"{name} must be finite")
    else:
        if minimum is not None and value < minimum:
            result.errors.append(f"{name} must be >= {minimum:g}")
        if maximum is not None and value > maximum:
            result.errors.append(f"{name} must be <= {maximum:g}")
    return result


def validate_sample_values(
    rate: float, concentration: float, pressure: float | None = None
) -> ValidationResult:
    """Check rate, concentration and (if measured) pressure against their domains."""
    result = validate_number(rate, "rate", *RATE_RANGE)
    result.extend(validate_number(concentration, "concentration", *CONCENTRATION_RANGE))
    if pressure is not None:
        result.extend(validate_number(pressure, "pressure", *PRESSURE_RANGE))
    return result


def validate_timestamp(timestamp: int) -> ValidationResult:
    result = validate_number(timestamp, "timestamp")
    if result.valid and timestamp < 0:
        result.errors.append("timestamp must be non-negative")
    return result


def sanitize_number(value: float, minimum: float, maximum: float, default: float) -> float:
    """Clamp *value* into [minimum, maximum]; non-finite input becomes *default*."""
    if not math.isfinite(value):
        return default
    return max(minimum, min(maximum, value))
