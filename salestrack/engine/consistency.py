"""Self-vs-FK and plan-vs-target consistency checks."""
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from salestrack.engine.types import (
    ConsistencyResult, DeviationRecord, GoalSet, Number, normalize_number
)
from salestrack.models.shared.enums import ColorBand, DeviationSeverity, MetricKey

GoalsLike = Union[GoalSet, Mapping[Any, Any], None]


def _as_goal_set(goals: GoalsLike) -> GoalSet:
    if isinstance(goals, GoalSet):
        return goals
    return GoalSet.from_mapping(goals)


def delta_percent(base: Any, other: Any) -> float:
    """``|other - base| / base * 100``; a zero base is defined as no deviation."""
    base = normalize_number(base)
    other = normalize_number(other)
    if base <= 0:
        return 0.0
    return abs(other - base) / base * 100


def signed_delta_percent(base: Any, other: Any) -> float:
    base = normalize_number(base)
    other = normalize_number(other)
    if base <= 0:
        return 0.0
    return (other - base) / base * 100


def delta_color(delta: float, yellow_from: float = 25, red_from: float = 50) -> ColorBand:
    magnitude = abs(delta)
    if magnitude >= red_from:
        return ColorBand.RED
    if magnitude >= yellow_from:
        return ColorBand.YELLOW
    return ColorBand.GREEN


def check_consistency(
    goals_a: GoalsLike,
    goals_b: GoalsLike,
    tolerance_percent: float,
    red_threshold_percent: float = 50,
) -> ConsistencyResult:
    """Compare two goal sets metric by metric.

    A metric deviates when its delta reaches ``tolerance_percent`` (inclusive)
    and is escalated to red at ``red_threshold_percent``. Deviations come back
    in canonical MetricKey order.
    """
    set_a = _as_goal_set(goals_a)
    set_b = _as_goal_set(goals_b)

    deviations: List[DeviationRecord] = []
    for metric in MetricKey:
        if not (set_a.has(metric) or set_b.has(metric)):
            continue
        value_a = set_a.target(metric)
        value_b = set_b.target(metric)
        delta = delta_percent(value_a, value_b)
        if delta < tolerance_percent:
            continue
        severity = DeviationSeverity.RED if delta >= red_threshold_percent else DeviationSeverity.YELLOW
        deviations.append(DeviationRecord(
            metric=metric,
            metric_label=metric.label,
            value_a=value_a,
            value_b=value_b,
            delta_percent=delta,
            severity=severity,
        ))

    return ConsistencyResult(
        is_consistent=not deviations,
        tolerance_percent=tolerance_percent,
        deviations=tuple(deviations),
    )


def top_deviations(deviations: Iterable[DeviationRecord], limit: int = 3) -> List[DeviationRecord]:
    return sorted(deviations, key=lambda record: abs(record.delta_percent), reverse=True)[:limit]


def planned_totals(
    baseline: Optional[Mapping[Any, Any]],
    plan_months: Optional[Sequence[Mapping[Any, Any]]],
) -> GoalSet:
    """IST-Basis plus the sum of the remaining plan months, per metric."""
    base = GoalSet.from_mapping(baseline)
    months = [GoalSet.from_mapping(month) for month in (plan_months or [])]
    totals = {}
    for metric in MetricKey:
        value: Number = base.target(metric)
        for month in months:
            value += month.target(metric)
        totals[metric] = value
    return GoalSet(targets=totals)


def check_plan_consistency(
    yearly_goals: GoalsLike,
    baseline: Optional[Mapping[Any, Any]],
    plan_months: Optional[Sequence[Mapping[Any, Any]]],
    tolerance_percent: float = 2,
    red_threshold_percent: float = 50,
) -> ConsistencyResult:
    """Does IST-Basis + remaining plan months add up to the yearly target?"""
    target_set = _as_goal_set(yearly_goals)
    target_set = GoalSet(
        period=target_set.period,
        author=target_set.author,
        targets={metric: target_set.target(metric) for metric in MetricKey},
    )
    return check_consistency(
        target_set,
        planned_totals(baseline, plan_months),
        tolerance_percent,
        red_threshold_percent,
    )
