"""Wall-clock utilities.

All sample timestamps in bhp-stream are integer milliseconds since the Unix
epoch.  This module is the single source of "now" so tests can monkey-patch
it trivially.
"""

from __future__ import annotations

import time

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60_000


def now_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000
