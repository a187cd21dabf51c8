import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Mapping

from salestrack.engine.types import GoalSet, PathExpectation, normalize_number
from salestrack.models.shared.enums import MetricKey


class InvalidPeriodError(ValueError):
    """Raised when a projection is asked for with a non-positive period length."""


class ProjectionOverflowError(ValueError):
    """Raised when target * elapsed / total is too large for a float."""


def _round_half_up(value: float) -> int:
    if not math.isfinite(value):
        raise ProjectionOverflowError(f"Expected value {value!r} is not a finite number")
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def project_expectation(target: Any, elapsed_units: Any, total_units: Any) -> int:
    """Linear share of ``target`` expected after ``elapsed_units`` of ``total_units``."""
    try:
        total = float(total_units)
    except (TypeError, ValueError):
        raise InvalidPeriodError(f"Period length must be a number, got {total_units!r}")
    if not total > 0:
        raise InvalidPeriodError(f"Period length must be positive, got {total_units!r}")

    try:
        expected = normalize_number(target) * normalize_number(elapsed_units) / total
    except OverflowError:
        raise ProjectionOverflowError(f"Expectation for target {target!r} does not fit into a float")
    return _round_half_up(expected)


def is_on_track(actual_to_date: Any, expected: Any, on_track_factor: float = 0.9) -> bool:
    return normalize_number(actual_to_date) >= normalize_number(expected) * on_track_factor


def monthly_share(yearly_target: Any) -> int:
    return project_expectation(yearly_target, 1, 12)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end`` (never negative)."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


def build_path_expectations(
    goals: GoalSet,
    actuals: Mapping[MetricKey, Any],
    elapsed_units: Any,
    total_units: Any,
    on_track_factor: float = 0.9,
) -> List[PathExpectation]:
    expectations = []
    for metric in MetricKey:
        target = goals.target(metric)
        expected = project_expectation(target, elapsed_units, total_units)
        actual = normalize_number(actuals.get(metric))
        expectations.append(PathExpectation(
            metric=metric,
            target=target,
            expected_to_date=expected,
            actual_to_date=actual,
            on_track=is_on_track(actual, expected, on_track_factor),
        ))
    return expectations
