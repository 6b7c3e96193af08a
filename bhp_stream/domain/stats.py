"""Point-in-time statistics for the window and the computation state.

These are observability objects, not control mechanisms.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class WindowStats(BaseModel):
    size: int
    oldest_timestamp: Optional[int] = None
    newest_timestamp: Optional[int] = None
    duration_seconds: float = 0.0

    model_config = {"frozen": True}


class StateStats(BaseModel):
    """Aggregate view of a ComputationState, emitted after every ingest."""

    window_size: int = Field(..., description="Samples currently retained")
    cache_size: int = Field(..., description="Cached BHP values")
    window_start_timestamp: Optional[int] = Field(None, description="Oldest retained timestamp")
    window_end_timestamp: Optional[int] = Field(None, description="Newest retained timestamp")
    window_duration_minutes: float = 0.0

    model_config = {"frozen": True}
