"""Tests for BHPConfig validation and application Settings."""

import math

import pytest
from pydantic import ValidationError

from bhp_stream.config import Settings
from bhp_stream.domain.config import DEFAULT_BHP_CONFIG, BHPConfig, build_config
from bhp_stream.domain.enums import OffsetMode, OrderingPolicy
from bhp_stream.domain.errors import ConfigurationError
from bhp_stream.simulation.config import DataPattern


class TestBHPConfig:
    def test_defaults(self) -> None:
        config = BHPConfig()
        assert config.max_time_diff_seconds == 60
        assert config.max_offset_minutes == 120
        assert config.min_offset_minutes == pytest.approx(0.0167)
        assert config.window_size_seconds == 7200

    def test_config_is_frozen(self) -> None:
        with pytest.raises(ValidationError):
            DEFAULT_BHP_CONFIG.max_offset_minutes = 1

    def test_min_must_be_below_max(self) -> None:
        with pytest.raises(ConfigurationError, match="min_offset_minutes"):
            build_config({"min_offset_minutes": 10, "max_offset_minutes": 10})

    @pytest.mark.parametrize(
        "field", ["max_time_diff_seconds", "max_offset_minutes", "window_size_seconds"]
    )
    def test_non_positive_rejected(self, field: str) -> None:
        with pytest.raises(ConfigurationError):
            build_config({field: 0})

    def test_negative_min_offset_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            build_config({"min_offset_minutes": -1})

    def test_nan_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            build_config({"max_time_diff_seconds": math.nan})

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            build_config({"max_time_diff": 10})

    def test_merged_leaves_original_untouched(self) -> None:
        changed = DEFAULT_BHP_CONFIG.merged(window_size_seconds=600)
        assert changed.window_size_seconds == 600
        assert DEFAULT_BHP_CONFIG.window_size_seconds == 7200


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings()
        assert s.offset_mode is OffsetMode.RATE_DERIVED
        assert s.ordering_policy is OrderingPolicy.REJECT
        assert s.default_offset_parameter == 120.0

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BHP_OFFSET_MODE", "fixed")
        monkeypatch.setenv("BHP_DEFAULT_OFFSET_MINUTES", "4.5")
        monkeypatch.setenv("BHP_ORDERING_POLICY", "sort")
        monkeypatch.setenv("BHP_SIMULATION_PATTERN", "pump_stop")

        s = Settings()

        assert s.offset_mode is OffsetMode.FIXED
        assert s.default_offset_parameter == 4.5
        assert s.ordering_policy is OrderingPolicy.SORT
        assert s.simulation_pattern is DataPattern.PUMP_STOP
