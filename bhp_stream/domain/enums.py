"""Controlled enumerations for the bhp-stream domain."""

from __future__ import annotations

from enum import Enum


class OffsetMode(str, Enum):
    """How the travel-time offset is determined for a deployment.

    The two modes are mutually exclusive: a ComputationState and the
    calculator policy it is paired with must agree on one of them.
    """

    RATE_DERIVED = "rate_derived"  # offset = flush volume / pump rate
    FIXED = "fixed"  # offset entered directly in minutes


class OrderingPolicy(str, Enum):
    """What the TimeWindow does with a sample older than its newest one."""

    REJECT = "reject"
    SORT = "sort"
