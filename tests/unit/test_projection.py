from datetime import date

import pytest

from salestrack.engine import (
    InvalidPeriodError, ProjectionOverflowError, build_path_expectations, is_on_track,
    monthly_share, months_between, project_expectation
)
from salestrack.engine.types import GoalSet
from salestrack.models.shared.enums import MetricKey


class TestProjectExpectation:
    def test_nine_of_twelve_months(self):
        assert project_expectation(120, 9, 12) == 90

    @pytest.mark.parametrize("target,elapsed,total,expected", [
        (5, 1, 2, 3),     # 2.5 rounds up
        (1, 1, 8, 0),     # 0.125
        (3, 1, 4, 1),     # 0.75
        (0, 5, 12, 0),
    ])
    def test_rounding_half_up(self, target, elapsed, total, expected):
        assert project_expectation(target, elapsed, total) == expected

    @pytest.mark.parametrize("total", [0, -1, "abc", None])
    def test_invalid_period_length(self, total):
        with pytest.raises(InvalidPeriodError):
            project_expectation(100, 1, total)

    def test_invalid_period_is_a_value_error(self):
        assert issubclass(InvalidPeriodError, ValueError)

    @pytest.mark.parametrize("target,elapsed,total", [
        (1e308, 10, 1),
        (10 ** 400, 1, 2),
        (1, 1e308, 1e-10),
    ])
    def test_overflowing_expectation(self, target, elapsed, total):
        with pytest.raises(ProjectionOverflowError):
            project_expectation(target, elapsed, total)

    def test_monthly_share(self):
        assert monthly_share(100) == 8
        assert monthly_share(30) == 3


class TestOnTrack:
    def test_factor_boundary_is_inclusive(self):
        assert is_on_track(81, 90, 0.9)
        assert not is_on_track(80, 90, 0.9)

    def test_nothing_expected_is_on_track(self):
        assert is_on_track(0, 0)


class TestMonthsBetween:
    def test_whole_months(self):
        assert months_between(date(2025, 1, 1), date(2025, 10, 1)) == 9
        assert months_between(date(2025, 7, 1), date(2026, 7, 1)) == 12

    def test_partial_month_is_not_counted(self):
        assert months_between(date(2025, 1, 15), date(2025, 2, 14)) == 0

    def test_never_negative(self):
        assert months_between(date(2025, 5, 1), date(2025, 1, 1)) == 0


class TestPathExpectations:
    def test_fa_on_track(self):
        path = build_path_expectations(GoalSet.from_mapping({"fa": 120}), {MetricKey.FA: 85}, 9, 12, 0.9)
        fa = path[0]
        assert fa.metric == MetricKey.FA
        assert fa.expected_to_date == 90
        assert fa.actual_to_date == 85
        assert fa.on_track

    def test_one_row_per_metric(self):
        path = build_path_expectations(GoalSet(), {}, 3, 12)
        assert [item.metric for item in path] == list(MetricKey)
        assert all(item.on_track for item in path)
