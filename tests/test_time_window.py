"""Tests for the TimeWindow sliding store."""

import math

import pytest

from bhp_stream.domain.enums import OrderingPolicy
from bhp_stream.domain.errors import ConfigurationError, OutOfOrderSampleError
from bhp_stream.store.time_window import TimeWindow

from tests.test_sample import _BASE, _sample


def _window(timestamps: list[int], window_size_seconds: float = 7200.0, **kw) -> TimeWindow:
    window = TimeWindow(window_size_seconds, **kw)
    for i, ts in enumerate(timestamps):
        window.add(_sample(ts, concentration=float(i)))
    return window


class TestEviction:
    def test_window_invariant_holds_after_every_add(self) -> None:
        window = TimeWindow(window_size_seconds=60)
        for i in range(20):
            window.add(_sample(_BASE + i * 10_000))
            assert window.newest().timestamp - window.oldest().timestamp <= 60_000

    def test_boundary_sample_is_retained(self) -> None:
        window = _window([_BASE, _BASE + 60_000], window_size_seconds=60)
        assert window.size() == 2

    def test_add_returns_evicted_samples(self) -> None:
        window = _window([_BASE, _BASE + 30_000], window_size_seconds=60)
        evicted = window.add(_sample(_BASE + 61_000))
        assert [s.timestamp for s in evicted] == [_BASE]
        assert window.oldest().timestamp == _BASE + 30_000

    def test_large_gap_evicts_everything_but_newest(self) -> None:
        window = _window([_BASE + i * 1000 for i in range(5)], window_size_seconds=60)
        evicted = window.add(_sample(_BASE + 3_600_000))
        assert len(evicted) == 5
        assert window.size() == 1

    def test_resize_shrinking_evicts_immediately(self) -> None:
        window = _window([_BASE + i * 60_000 for i in range(10)])
        evicted = window.resize(120)
        assert len(evicted) == 7
        assert window.size() == 3
        assert window.window_size_seconds == 120

    def test_invalid_window_size_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            TimeWindow(window_size_seconds=0)
        window = TimeWindow()
        with pytest.raises(ConfigurationError):
            window.resize(-5)
        assert window.window_size_seconds == 7200


class TestOrdering:
    def test_equal_timestamps_are_accepted(self) -> None:
        window = _window([_BASE, _BASE])
        assert window.size() == 2

    def test_out_of_order_rejected_without_mutation(self) -> None:
        window = _window([_BASE, _BASE + 10_000])
        with pytest.raises(OutOfOrderSampleError) as excinfo:
            window.add(_sample(_BASE + 5_000))
        assert excinfo.value.newest_timestamp == _BASE + 10_000
        assert window.size() == 2

    def test_sort_policy_inserts_in_order(self) -> None:
        window = _window([_BASE, _BASE + 20_000], ordering=OrderingPolicy.SORT)
        window.add(_sample(_BASE + 10_000))
        assert [s.timestamp for s in window.samples()] == [_BASE, _BASE + 10_000, _BASE + 20_000]

    def test_sort_policy_evicts_too_old_late_sample(self) -> None:
        window = _window([_BASE + 100_000], window_size_seconds=60, ordering=OrderingPolicy.SORT)
        evicted = window.add(_sample(_BASE))
        assert [s.timestamp for s in evicted] == [_BASE]
        assert window.size() == 1


class TestNearest:
    def test_empty_window(self) -> None:
        match = TimeWindow().find_nearest(_BASE)
        assert match.sample is None
        assert math.isinf(match.time_diff_ms)

    @pytest.mark.parametrize(
        "offset, expected, diff",
        [
            (14_000, 10_000, 4_000),
            (16_000, 20_000, 4_000),
            (-5_000, 0, 5_000),
            (30_000, 20_000, 10_000),
            (20_000, 20_000, 0),
        ],
    )
    def test_closest_sample_is_found(self, offset: int, expected: int, diff: int) -> None:
        window = _window([_BASE, _BASE + 10_000, _BASE + 20_000])
        match = window.find_nearest(_BASE + offset)
        assert match.sample.timestamp == _BASE + expected
        assert match.time_diff_ms == diff

    def test_tie_goes_to_earlier_sample(self) -> None:
        window = _window([_BASE, _BASE + 10_000, _BASE + 20_000])
        assert window.find_nearest(_BASE + 15_000).sample.timestamp == _BASE + 10_000

    def test_duplicate_timestamps_report_first_of_run(self) -> None:
        window = _window([_BASE, _BASE + 10_000, _BASE + 10_000, _BASE + 20_000])
        assert window.find_nearest(_BASE + 10_000).sample.concentration == 1.0
        assert window.find_nearest(_BASE + 12_000).sample.concentration == 1.0

    def test_fractional_target(self) -> None:
        window = _window([_BASE, _BASE + 1_000])
        match = window.find_nearest(_BASE + 400.5)
        assert match.sample.timestamp == _BASE
        assert match.time_diff_ms == pytest.approx(400.5)


class TestQueries:
    def test_find_exact(self) -> None:
        window = _window([_BASE, _BASE + 1_000])
        assert window.find_exact(_BASE + 1_000).concentration == 1.0
        assert window.find_exact(_BASE + 500) is None

    def test_latest_at_or_before(self) -> None:
        window = _window([_BASE, _BASE + 1_000, _BASE + 2_000])
        assert window.latest_at_or_before(_BASE + 1_500).timestamp == _BASE + 1_000
        assert window.latest_at_or_before(_BASE + 2_000).timestamp == _BASE + 2_000
        assert window.latest_at_or_before(_BASE - 1) is None

    def test_range_is_inclusive(self) -> None:
        window = _window([_BASE + i * 1_000 for i in range(5)])
        found = window.range(_BASE + 1_000, _BASE + 3_000)
        assert [s.timestamp for s in found] == [_BASE + 1_000, _BASE + 2_000, _BASE + 3_000]

    def test_samples_returns_copy(self) -> None:
        window = _window([_BASE])
        copy = window.samples()
        copy.clear()
        assert window.size() == 1

    def test_stats(self) -> None:
        window = _window([_BASE, _BASE + 90_000])
        stats = window.stats()
        assert stats.size == 2
        assert stats.oldest_timestamp == _BASE
        assert stats.newest_timestamp == _BASE + 90_000
        assert stats.duration_seconds == 90.0

    def test_empty_stats(self) -> None:
        stats = TimeWindow().stats()
        assert stats.size == 0
        assert stats.oldest_timestamp is None
        assert stats.duration_seconds == 0.0

    def test_clear(self) -> None:
        window = _window([_BASE, _BASE + 1_000])
        window.clear()
        assert window.is_empty()
        assert window.newest() is None
