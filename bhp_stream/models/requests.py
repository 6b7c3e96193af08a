"""Request bodies accepted by the HTTP shell."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from bhp_stream.simulation.config import DataPattern


class OffsetUpdate(BaseModel):
    """New flush volume (bbl) or offset time (minutes), depending on mode."""

    value: float = Field(..., description="Flush volume in bbl or offset in minutes")


class ConfigPatch(BaseModel):
    """Partial BHPConfig update; omitted fields keep their current value."""

    max_time_diff_seconds: Optional[float] = None
    max_offset_minutes: Optional[float] = None
    min_offset_minutes: Optional[float] = None
    window_size_seconds: Optional[float] = None

    model_config = {"extra": "forbid"}

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SimulationStart(BaseModel):
    pattern: Optional[DataPattern] = None
    speed: Optional[float] = Field(None, description="Speed multiplier, 0 < speed <= 10")
    seed: Optional[int] = None
    sampling_rate_hz: Optional[float] = None
    reset: bool = Field(False, description="Rewind the generator before starting")

    def generator_changes(self) -> dict[str, Any]:
        return self.model_dump(
            include={"pattern", "seed", "sampling_rate_hz"}, exclude_none=True
        )
