from typing import Any, List, Mapping, Optional

from salestrack.engine.types import (
    ColorThresholds, GoalSet, ProgressResult, normalize_number
)
from salestrack.models.shared.enums import ColorBand, MetricKey

DEFAULT_THRESHOLDS = ColorThresholds()


def color_band(percentage: float, thresholds: Optional[ColorThresholds] = None) -> ColorBand:
    """Pick the first band whose lower bound is met, most restrictive first."""
    thresholds = thresholds or DEFAULT_THRESHOLDS
    for lower_bound, band in thresholds.ordered_bands():
        if percentage >= lower_bound:
            return band
    return ColorBand.RED


def compute_progress(
    achieved: Any,
    target: Any,
    thresholds: Optional[ColorThresholds] = None,
    metric: Optional[MetricKey] = None,
) -> ProgressResult:
    """Percentage of target reached plus its Ampel band.

    The percentage is not clamped; use ``ProgressResult.bar_width`` for display.
    A zero target yields 0% in the neutral ``no_target`` band.
    """
    achieved = normalize_number(achieved)
    target = normalize_number(target)

    if target == 0:
        return ProgressResult(
            metric=metric,
            achieved=achieved,
            target=0,
            percentage=0.0,
            color_band=ColorBand.NO_TARGET,
        )

    percentage = achieved / target * 100
    return ProgressResult(
        metric=metric,
        achieved=achieved,
        target=target,
        percentage=percentage,
        color_band=color_band(percentage, thresholds),
    )


def progress_for_goals(
    totals: Mapping[MetricKey, Any],
    goals: GoalSet,
    thresholds: Optional[ColorThresholds] = None,
) -> List[ProgressResult]:
    return [
        compute_progress(totals.get(metric), goals.target(metric), thresholds, metric=metric)
        for metric in MetricKey
    ]
