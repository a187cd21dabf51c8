from datetime import date

import pytest

from salestrack.core.exceptions import ValidationError
from salestrack.engine.types import ThresholdConfig, normalize_number
from salestrack.models.shared.enums import GoalPeriod
from salestrack.services.admin.config_service import build_threshold_config, coerce_config_value, default_config
from salestrack.utils.periods import (
    add_months, iter_months, month_key, normalize_period_start, period_range, previous_month
)


class TestNormalizeNumber:
    @pytest.mark.parametrize("value,expected", [
        (None, 0), (True, 1), (False, 0), (5, 5), (-5, 0), ("12", 12), (" 7 ", 7),
        ("2.5", 2.5), ("abc", 0), (float("nan"), 0), (float("-inf"), 0), ([], 0),
    ])
    def test_values(self, value, expected):
        assert normalize_number(value) == expected

    def test_integral_strings_stay_integers(self):
        assert isinstance(normalize_number("12"), int)


class TestPeriods:
    def test_week_is_monday_to_sunday(self):
        week = period_range(GoalPeriod.WEEKLY, date(2025, 3, 6))
        assert (week.start, week.end) == (date(2025, 3, 3), date(2025, 3, 9))

    def test_month_and_year(self):
        month = period_range(GoalPeriod.MONTHLY, date(2024, 2, 10))
        assert (month.start, month.end) == (date(2024, 2, 1), date(2024, 2, 29))
        year = period_range(GoalPeriod.YEARLY, date(2025, 6, 1))
        assert (year.start, year.end) == (date(2025, 1, 1), date(2025, 12, 31))

    def test_period_start_normalisation(self):
        assert normalize_period_start(GoalPeriod.WEEKLY, date(2025, 3, 6)) == date(2025, 3, 3)
        assert normalize_period_start(GoalPeriod.MONTHLY, date(2025, 3, 6)) == date(2025, 3, 1)
        assert normalize_period_start(GoalPeriod.YEARLY, date(2025, 7, 1)) == date(2025, 7, 1)

    def test_month_helpers(self):
        assert month_key(date(2025, 1, 31)) == "2025-01"
        assert previous_month("2025-01") == "2024-12"
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 1)
        assert iter_months(date(2025, 11, 1), date(2026, 2, 10)) == [
            date(2025, 11, 1), date(2025, 12, 1), date(2026, 1, 1), date(2026, 2, 1)
        ]


class TestConfigValues:
    def test_defaults_build_default_thresholds(self):
        config = build_threshold_config(default_config())
        assert config.progress.yellow == 30
        assert config.progress.green == 80
        assert config.progress.diamond is None
        assert config.deviation_tolerance_percent == 25
        assert config.quota_bands.critical == 20

    def test_insight_thresholds_are_configurable(self):
        values = default_config()
        assert build_threshold_config(values) == ThresholdConfig()

        values.update(strength_at=120, weakness_below=40, min_tiv_per_fa=0.6, min_tgs_per_tiv=0.3,
                      min_recommendations_per_fa=2, min_bav_per_fa=0.1)
        config = build_threshold_config(values)
        assert (config.strength_at, config.weakness_below) == (120, 40)
        assert config.min_tiv_per_fa == 0.6
        assert config.min_tgs_per_tiv == 0.3
        assert config.min_recommendations_per_fa == 2
        assert config.min_bav_per_fa == 0.1

    def test_coercion(self):
        assert coerce_config_value("on_track_factor", "0.8") == 0.8
        assert coerce_config_value("lock_days", "14") == 14
        assert coerce_config_value("progress_diamond_threshold", None) is None

    @pytest.mark.parametrize("key,value", [
        ("unknown_key", 1),
        ("on_track_factor", "abc"),
        ("deviation_tolerance_percent", -1),
        ("progress_green_threshold", None),
        ("lock_days", 0),
    ])
    def test_invalid_values(self, key, value):
        with pytest.raises(ValidationError):
            coerce_config_value(key, value)
