"""Tests for ComputationState: window, cache coherence and offset parameter."""

import math

import pytest

from bhp_stream.domain.enums import OffsetMode, OrderingPolicy
from bhp_stream.domain.errors import ConfigurationError
from bhp_stream.store.computation_state import ComputationState

from tests.test_sample import _BASE, _MINUTE, _sample


@pytest.fixture
def state() -> ComputationState:
    return ComputationState(mode=OffsetMode.RATE_DERIVED, window_size_seconds=60)


class TestCacheCoherence:
    def test_evicted_timestamp_is_purged_in_same_call(self, state: ComputationState) -> None:
        state.add_sample(_sample(_BASE))
        state.add_sample(_sample(_BASE + 30_000))
        state.cache_value(_BASE, 2.0)
        state.cache_value(_BASE + 30_000, 2.1)

        state.add_sample(_sample(_BASE + 61_000))

        assert not state.has_cached(_BASE)
        assert state.get_cached_value(_BASE + 30_000) == 2.1

    def test_resize_purges_cache(self, state: ComputationState) -> None:
        state.add_sample(_sample(_BASE))
        state.add_sample(_sample(_BASE + 50_000))
        state.cache_value(_BASE, 2.0)
        state.resize_window(10)
        assert not state.has_cached(_BASE)

    def test_late_sample_clears_whole_cache(self) -> None:
        state = ComputationState(ordering=OrderingPolicy.SORT)
        state.add_sample(_sample(_BASE))
        state.add_sample(_sample(_BASE + 20_000))
        state.cache_value(_BASE + 20_000, 2.0)
        state.add_sample(_sample(_BASE + 10_000))
        assert state.cache_size == 0

    def test_orphaned_what_if_entries_are_swept(self, state: ComputationState) -> None:
        state.add_sample(_sample(_BASE))
        state.add_sample(_sample(_BASE + 30_000))
        state.cache_value(_BASE - 100_000, 1.0)
        state.cache_value(_BASE - 50_000, 1.0)
        state.cache_value(_BASE + 30_000, 2.0)

        state.add_sample(_sample(_BASE + 61_000))

        assert not state.has_cached(_BASE - 100_000)
        assert not state.has_cached(_BASE - 50_000)
        assert state.has_cached(_BASE + 30_000)

    def test_invalidate_cache(self, state: ComputationState) -> None:
        state.cache_value(_BASE, 1.0)
        state.invalidate_cache()
        assert state.get_cached_value(_BASE) is None


class TestOffsetParameter:
    def test_flush_volume_starts_unset(self, state: ComputationState) -> None:
        assert state.get_flush_volume() is None

    def test_set_flush_volume(self, state: ComputationState) -> None:
        state.set_flush_volume(120)
        assert state.get_flush_volume() == 120.0

    @pytest.mark.parametrize("bad", [-1.0, math.nan])
    def test_invalid_flush_volume_rejected(self, state: ComputationState, bad: float) -> None:
        state.set_flush_volume(120)
        with pytest.raises(ConfigurationError):
            state.set_flush_volume(bad)
        assert state.get_flush_volume() == 120.0

    def test_changing_parameter_clears_cache(self, state: ComputationState) -> None:
        state.set_flush_volume(120)
        state.cache_value(_BASE, 2.0)
        state.set_flush_volume(120)
        assert state.has_cached(_BASE)
        state.set_flush_volume(150)
        assert not state.has_cached(_BASE)

    def test_other_mode_accessors_raise(self, state: ComputationState) -> None:
        with pytest.raises(ConfigurationError):
            state.get_offset_minutes()
        with pytest.raises(ConfigurationError):
            state.set_offset_minutes(3)

    def test_fixed_mode_offset_minutes(self) -> None:
        state = ComputationState(mode=OffsetMode.FIXED)
        state.set_offset_minutes(0)
        assert state.get_offset_minutes() == 0.0
        with pytest.raises(ConfigurationError):
            state.get_flush_volume()


class TestStatsAndClear:
    def test_stats(self) -> None:
        state = ComputationState()
        state.add_sample(_sample(_BASE))
        state.add_sample(_sample(_BASE + 2 * _MINUTE))
        state.cache_value(_BASE, 1.0)

        stats = state.stats()

        assert stats.window_size == 2
        assert stats.cache_size == 1
        assert stats.window_start_timestamp == _BASE
        assert stats.window_end_timestamp == _BASE + 2 * _MINUTE
        assert stats.window_duration_minutes == pytest.approx(2.0)

    def test_clear_resets_everything(self, state: ComputationState) -> None:
        state.set_flush_volume(120)
        state.add_sample(_sample(_BASE))
        state.cache_value(_BASE, 1.0)

        state.clear()

        assert state.stats().window_size == 0
        assert state.cache_size == 0
        assert state.get_flush_volume() is None

    def test_window_samples_are_a_copy(self, state: ComputationState) -> None:
        state.add_sample(_sample(_BASE))
        state.get_window_samples().clear()
        assert len(state.window) == 1
