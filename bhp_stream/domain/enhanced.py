"""EnhancedSample: a Sample carrying the BHP computed for its timestamp."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from bhp_stream.domain.result import BHPCalculationResult, CalculationDetails
from bhp_stream.domain.sample import Sample


class EnhancedSample(Sample):
    """Created exactly once per ingested sample and never mutated."""

    bhp: Optional[float] = Field(
        default=None, description="Bottom-hole proppant concentration, None while pending"
    )
    details: CalculationDetails

    @classmethod
    def from_result(cls, sample: Sample, result: BHPCalculationResult) -> EnhancedSample:
        return cls(
            timestamp=sample.timestamp,
            rate=sample.rate,
            concentration=sample.concentration,
            pressure=sample.pressure,
            bhp=result.value,
            details=result.details,
        )
