"""Sample: one timestamped surface measurement.

The core treats the numeric fields as opaque numbers: range checks belong to
the producer (see bhp_stream.simulation.validators), so out-of-range or
non-finite values are accepted here and must never crash the engine.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class Sample(BaseModel):
    """An immutable surface measurement."""

    timestamp: int = Field(..., description="Epoch milliseconds")
    rate: float = Field(..., description="Slurry pump rate (bbl/min), nominally 0–100")
    concentration: float = Field(
        ..., description="Surface proppant concentration (lb/gal), nominally 0–20"
    )
    pressure: Optional[float] = Field(
        default=None,
        description="Treating pressure (psi), nominally 0–15000; None means not measured",
    )

    model_config = {"frozen": True}
