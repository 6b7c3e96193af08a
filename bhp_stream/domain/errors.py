"""Exceptions raised by the bhp-stream core.

Only caller mistakes are exceptions.  "Cannot determine BHP yet" is a
regular result with value None, never an exception.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a tolerance, window size or offset parameter is invalid.

    The previously committed configuration always remains in effect.
    """


class OutOfOrderSampleError(ValueError):
    """Raised when a sample arrives older than the newest one in the window."""

    def __init__(self, timestamp: int, newest_timestamp: int) -> None:
        self.timestamp = timestamp
        self.newest_timestamp = newest_timestamp
        super().__init__(
            f"sample timestamp {timestamp} is older than newest window "
            f"timestamp {newest_timestamp}"
        )
