"""BHP calculation results and their diagnostics.

A result with ``value is None`` is not a failure: it means "cannot determine
BHP yet" and always carries an ``error_message`` explaining why.  A value of
exactly ``0.0`` from the rate-derived policy means the pump is stopped (or the
offset is out of range), which is distinct from pending.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from bhp_stream.domain.sample import Sample


class CalculationDetails(BaseModel):
    """Diagnostics for one calculation.  Populated even when value is None."""

    timestamp: int = Field(..., description="Target timestamp the BHP was requested for")
    offset_minutes: float = Field(0.0, description="Resolved travel-time offset")
    offset_milliseconds: float = Field(0.0, description="Resolved offset in ms")
    historical_timestamp: float = Field(0.0, description="timestamp - offset")
    historical_sample: Optional[Sample] = Field(
        None, description="Window sample nearest to historical_timestamp"
    )
    time_difference_seconds: float = Field(
        0.0, description="|historical_sample.timestamp - historical_timestamp| in seconds"
    )
    reference_rate: float = Field(0.0, description="Pump rate used to derive the offset")
    from_cache: bool = False
    error_message: Optional[str] = None

    model_config = {"frozen": True}


class BHPCalculationResult(BaseModel):
    """Outcome of a single BHP calculation."""

    value: Optional[float] = Field(..., description="BHP in lb/gal, None while pending")
    details: CalculationDetails

    model_config = {"frozen": True}

    @property
    def is_pending(self) -> bool:
        return self.value is None
