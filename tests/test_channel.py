"""Tests for ReplayChannel delivery, replay and subscriber isolation."""

import logging

import pytest

from bhp_stream.streaming.channel import ReplayChannel


@pytest.fixture
def channel() -> ReplayChannel[int]:
    return ReplayChannel("numbers")


class TestDelivery:
    def test_values_delivered_in_publish_order(self, channel: ReplayChannel[int]) -> None:
        received: list[int] = []
        channel.subscribe(received.append)
        for i in range(5):
            channel.publish(i)
        assert received == [0, 1, 2, 3, 4]

    def test_every_subscriber_receives(self, channel: ReplayChannel[int]) -> None:
        a: list[int] = []
        b: list[int] = []
        channel.subscribe(a.append)
        channel.subscribe(b.append)
        channel.publish(7)
        assert a == b == [7]

    def test_latest(self, channel: ReplayChannel[int]) -> None:
        assert channel.latest is None
        assert not channel.has_value
        channel.publish(3)
        assert channel.latest == 3
        assert channel.has_value


class TestReplay:
    def test_late_subscriber_gets_latest_value(self, channel: ReplayChannel[int]) -> None:
        channel.publish(1)
        channel.publish(2)
        received: list[int] = []
        channel.subscribe(received.append)
        channel.publish(3)
        assert received == [2, 3]

    def test_replay_can_be_skipped(self, channel: ReplayChannel[int]) -> None:
        channel.publish(1)
        received: list[int] = []
        channel.subscribe(received.append, replay=False)
        assert received == []

    def test_initial_value_is_replayed(self) -> None:
        channel: ReplayChannel[str] = ReplayChannel("greeting", "hello")
        received: list[str] = []
        channel.subscribe(received.append)
        assert received == ["hello"]

    def test_reset_forgets_latest(self, channel: ReplayChannel[int]) -> None:
        channel.publish(1)
        channel.reset()
        received: list[int] = []
        channel.subscribe(received.append)
        assert received == []
        assert channel.latest is None


class TestSubscriptions:
    def test_unsubscribe_stops_delivery(self, channel: ReplayChannel[int]) -> None:
        a: list[int] = []
        b: list[int] = []
        sub = channel.subscribe(a.append)
        channel.subscribe(b.append)
        channel.publish(1)
        sub.unsubscribe()
        channel.publish(2)
        assert a == [1]
        assert b == [1, 2]
        assert channel.subscriber_count == 1

    def test_unsubscribe_is_idempotent(self, channel: ReplayChannel[int]) -> None:
        sub = channel.subscribe(lambda _: None)
        sub.unsubscribe()
        sub.unsubscribe()
        assert not sub.active
        assert channel.subscriber_count == 0

    def test_context_manager_unsubscribes(self, channel: ReplayChannel[int]) -> None:
        received: list[int] = []
        with channel.subscribe(received.append):
            channel.publish(1)
        channel.publish(2)
        assert received == [1]

    def test_failing_subscriber_is_dropped(
        self, channel: ReplayChannel[int], caplog: pytest.LogCaptureFixture
    ) -> None:
        def explode(_: int) -> None:
            raise RuntimeError("boom")

        healthy: list[int] = []
        bad = channel.subscribe(explode)
        channel.subscribe(healthy.append)

        with caplog.at_level(logging.WARNING, logger="bhp_stream.streaming.channel"):
            channel.publish(1)
        channel.publish(2)

        assert healthy == [1, 2]
        assert not bad.active
        assert channel.subscriber_count == 1
        assert "Dropping subscriber of numbers" in caplog.text

    def test_unsubscribe_during_delivery(self, channel: ReplayChannel[int]) -> None:
        received: list[int] = []
        subs = []

        def once(value: int) -> None:
            received.append(value)
            subs[0].unsubscribe()

        subs.append(channel.subscribe(once))
        channel.publish(1)
        channel.publish(2)
        assert received == [1]
