"""ReplayChannel: a broadcast channel that remembers its latest value.

Every published value is delivered synchronously, in publish order, to each
current subscriber.  A new subscriber immediately receives the most recent
value (if any) before anything published later.  This is a replay, not a
new computation.

The channel is independent of any concurrency runtime.  Async consumers
(e.g. WebSocket handlers) subscribe with a callback that enqueues into their
own asyncio.Queue.

A subscriber whose callback raises is removed and logged; the publisher and
the other subscribers are unaffected.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Callback = Callable[[T], None]

_UNSET = object()


class Subscription(Generic[T]):
    """Handle returned by ReplayChannel.subscribe(); cancel with unsubscribe()."""

    __slots__ = ("_channel", "_callback", "_active")

    def __init__(self, channel: ReplayChannel[T], callback: Callback) -> None:
        self._channel = channel
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Stop further deliveries to this subscriber.  Idempotent."""
        if self._active:
            self._active = False
            self._channel._remove(self)

    def _deliver(self, value: T) -> None:
        self._callback(value)

    def __enter__(self) -> Subscription[T]:
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class ReplayChannel(Generic[T]):
    """Hot broadcast channel with last-value replay.

    Args:
        name: Label used in log messages.
        initial: Optional value replayed to subscribers before the first
            publish.
    """

    def __init__(self, name: str, initial: T | object = _UNSET) -> None:
        self.name = name
        self._latest = initial
        self._subscriptions: list[Subscription[T]] = []

    # ── Publishing ───────────────────────────────────────────────────────

    def publish(self, value: T) -> None:
        self._latest = value
        for sub in list(self._subscriptions):
            if sub.active:
                self._safe_deliver(sub, value)

    def reset(self) -> None:
        """Forget the latest value; subscribers are kept."""
        self._latest = _UNSET

    # ── Subscribing ──────────────────────────────────────────────────────

    def subscribe(self, callback: Callback, replay: bool = True) -> Subscription[T]:
        """Register *callback*; it receives the latest value straight away."""
        sub: Subscription[T] = Subscription(self, callback)
        self._subscriptions.append(sub)
        logger.debug("Subscriber added to %s (%d total)", self.name, len(self._subscriptions))
        if replay and self._latest is not _UNSET:
            self._safe_deliver(sub, self._latest)  # type: ignore[arg-type]
        return sub

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def has_value(self) -> bool:
        return self._latest is not _UNSET

    @property
    def latest(self) -> T | None:
        """Most recently published value, or None before the first publish."""
        return None if self._latest is _UNSET else self._latest  # type: ignore[return-value]

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    # ── Internals ────────────────────────────────────────────────────────

    def _safe_deliver(self, sub: Subscription[T], value: T) -> None:
        try:
            sub._deliver(value)
        except Exception as exc:
            logger.warning(
                "Dropping subscriber of %s after delivery failure: %s",
                self.name,
                exc,
                exc_info=True,
            )
            sub.unsubscribe()

    def _remove(self, sub: Subscription[T]) -> None:
        try:
            self._subscriptions.remove(sub)
        except ValueError:
            return
        logger.debug("Subscriber removed from %s (%d remaining)", self.name, len(self._subscriptions))

    def __repr__(self) -> str:
        return f"ReplayChannel(name={self.name!r}, subscribers={len(self._subscriptions)})"
