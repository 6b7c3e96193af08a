"""TimeWindow: bounded, time-ordered store of Samples.

Design notes:
    - Samples live in a deque with a parallel deque of timestamps, so eviction
      from the front is O(1) and nearest-timestamp lookup is a bisect over the
      timestamps.
    - Invariant: for every retained sample,
      ``newest.timestamp - sample.timestamp <= window_size_seconds * 1000``.
    - The window never touches the result cache.  Evicted samples are
      returned to the caller (ComputationState) which purges the cache.
    - Out-of-order samples are handled per OrderingPolicy: rejected before any
      mutation, or inserted in timestamp order.
"""

from __future__ import annotations

import logging
import math
from bisect import bisect_left, bisect_right
from collections import deque
from typing import NamedTuple

from bhp_stream.domain.enums import OrderingPolicy
from bhp_stream.domain.errors import ConfigurationError, OutOfOrderSampleError
from bhp_stream.domain.sample import Sample
from bhp_stream.domain.stats import WindowStats
from bhp_stream.foundation.clock import MS_PER_SECOND

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE_SECONDS = 7200.0


class NearestMatch(NamedTuple):
    sample: Sample | None
    time_diff_ms: float


class TimeWindow:
    """Sliding window of Samples, ordered by timestamp.

    Args:
        window_size_seconds: How much history to retain, measured back from
            the newest sample.
        ordering: What to do when a sample is older than the newest one.
    """

    def __init__(
        self,
        window_size_seconds: float = DEFAULT_WINDOW_SIZE_SECONDS,
        ordering: OrderingPolicy = OrderingPolicy.REJECT,
    ) -> None:
        _check_window_size(window_size_seconds)
        self._window_size_seconds = float(window_size_seconds)
        self._ordering = ordering
        self._samples: deque[Sample] = deque()
        self._timestamps: deque[int] = deque()

    # ── Mutation ─────────────────────────────────────────────────────────

    def add(self, sample: Sample) -> list[Sample]:
        """Insert *sample* and evict whatever fell out of the window.

        Returns the evicted samples, oldest first.

        Raises:
            OutOfOrderSampleError: If ordering is REJECT and the sample is
                older than the newest retained one.  Nothing is mutated.
        """
        if self._timestamps and sample.timestamp < self._timestamps[-1]:
            if self._ordering is OrderingPolicy.REJECT:
                raise OutOfOrderSampleError(sample.timestamp, self._timestamps[-1])
            idx = bisect_right(self._timestamps, sample.timestamp)
            self._samples.insert(idx, sample)
            self._timestamps.insert(idx, sample.timestamp)
            logger.debug("Inserted late sample %d at index %d", sample.timestamp, idx)
        else:
            self._samples.append(sample)
            self._timestamps.append(sample.timestamp)
        return self._evict()

    def resize(self, window_size_seconds: float) -> list[Sample]:
        """Change the retention period, evicting immediately if it shrank."""
        _check_window_size(window_size_seconds)
        self._window_size_seconds = float(window_size_seconds)
        return self._evict()

    def clear(self) -> None:
        self._samples.clear()
        self._timestamps.clear()

    # ── Lookup ───────────────────────────────────────────────────────────

    def find_nearest(self, target_timestamp: float) -> NearestMatch:
        """Binary-search the sample whose timestamp is closest to *target_timestamp*.

        Ties between two neighbours go to the earlier one.  An empty window
        yields ``(None, inf)``.
        """
        n = len(self._timestamps)
        if n == 0:
            return NearestMatch(None, math.inf)

        idx = bisect_left(self._timestamps, target_timestamp)
        if idx == 0:
            chosen = 0
        elif idx == n:
            chosen = n - 1
        else:
            before = target_timestamp - self._timestamps[idx - 1]
            after = self._timestamps[idx] - target_timestamp
            chosen = idx - 1 if before <= after else idx

        # Duplicate timestamps: report the first of the run.
        chosen = bisect_left(self._timestamps, self._timestamps[chosen], 0, chosen + 1)
        found = self._samples[chosen]
        return NearestMatch(found, abs(found.timestamp - target_timestamp))

    def find_exact(self, timestamp: int) -> Sample | None:
        """First sample whose timestamp equals *timestamp*, if any."""
        idx = bisect_left(self._timestamps, timestamp)
        if idx < len(self._timestamps) and self._timestamps[idx] == timestamp:
            return self._samples[idx]
        return None

    def latest_at_or_before(self, timestamp: float) -> Sample | None:
        """Most recent sample with ``sample.timestamp <= timestamp``."""
        idx = bisect_right(self._timestamps, timestamp)
        if idx == 0:
            return None
        return self._samples[idx - 1]

    def range(self, start_timestamp: float, end_timestamp: float) -> list[Sample]:
        """Samples with ``start <= timestamp <= end`` (a new list)."""
        lo = bisect_left(self._timestamps, start_timestamp)
        hi = bisect_right(self._timestamps, end_timestamp)
        return [self._samples[i] for i in range(lo, hi)]

    # ── Queries ──────────────────────────────────────────────────────────

    def oldest(self) -> Sample | None:
        return self._samples[0] if self._samples else None

    def newest(self) -> Sample | None:
        return self._samples[-1] if self._samples else None

    def samples(self) -> list[Sample]:
        """Copy of the retained samples, oldest first."""
        return list(self._samples)

    def size(self) -> int:
        return len(self._samples)

    def is_empty(self) -> bool:
        return not self._samples

    @property
    def window_size_seconds(self) -> float:
        return self._window_size_seconds

    @property
    def ordering(self) -> OrderingPolicy:
        return self._ordering

    def stats(self) -> WindowStats:
        if not self._samples:
            return WindowStats(size=0)
        oldest, newest = self._timestamps[0], self._timestamps[-1]
        return WindowStats(
            size=len(self._samples),
            oldest_timestamp=oldest,
            newest_timestamp=newest,
            duration_seconds=(newest - oldest) / MS_PER_SECOND,
        )

    # ── Internals ────────────────────────────────────────────────────────

    def _evict(self) -> list[Sample]:
        if not self._timestamps:
            return []
        cutoff = self._timestamps[-1] - self._window_size_seconds * MS_PER_SECOND
        evicted: list[Sample] = []
        while self._timestamps and self._timestamps[0] < cutoff:
            self._timestamps.popleft()
            evicted.append(self._samples.popleft())
        if evicted:
            logger.debug("Evicted %d sample(s) older than %d", len(evicted), cutoff)
        return evicted

    # ── Dunder ───────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._samples)

    def __repr__(self) -> str:
        return (
            f"TimeWindow(window_size_seconds={self._window_size_seconds}, "
            f"size={len(self._samples)})"
        )


def _check_window_size(window_size_seconds: float) -> None:
    if not (window_size_seconds > 0 and math.isfinite(window_size_seconds)):
        raise ConfigurationError("window_size_seconds must be positive")
