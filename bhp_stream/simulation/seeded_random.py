"""SeededRandom: reproducible pseudo-random numbers for synthetic data.

A linear congruential generator (a=1664525, c=1013904223, m=2**32) so a
given seed always replays the same sequence, independent of the host's
``random`` module state.
"""

from __future__ import annotations

import math

from bhp_stream.foundation.clock import now_ms

_A = 1664525
_C = 1013904223
_M = 2**32


class SeededRandom:
    def __init__(self, seed: int) -> None:
        self._state = int(seed) % _M

    def next(self) -> float:
        """Next value in [0, 1)."""
        self._state = (_A * self._state + _C) % _M
        return self._state / _M

    def gaussian(self, mean: float = 0.0, std_dev: float = 1.0) -> float:
        """Normally distributed value via the Box-Muller transform."""
        u1 = self.next() or 1.0 / _M
        u2 = self.next()
        z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return z0 * std_dev + mean

    def next_range(self, low: float, high: float) -> float:
        """Float in [low, high)."""
        return self.next() * (high - low) + low

    def next_boolean(self, probability: float = 0.5) -> bool:
        return self.next() < probability

    def reset(self, seed: int) -> None:
        self._state = int(seed) % _M


def create_seeded_random(seed: int | None = None) -> SeededRandom:
    """SeededRandom seeded with *seed*, or with the current time."""
    return SeededRandom(now_ms() if seed is None else seed)
