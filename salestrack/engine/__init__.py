from salestrack.engine.aggregator import aggregate, aggregate_by_user, average_per_entry, combine_totals
from salestrack.engine.consistency import (
    check_consistency, check_plan_consistency, delta_color, delta_percent,
    signed_delta_percent, top_deviations
)
from salestrack.engine.progress import color_band, compute_progress, progress_for_goals
from salestrack.engine.projection import (
    InvalidPeriodError, ProjectionOverflowError, build_path_expectations, is_on_track,
    monthly_share, months_between, project_expectation
)
from salestrack.engine.quotas import analyze_quotas, classify_progress, compute_quotas
from salestrack.engine.types import (
    AggregateTotal, ColorThresholds, ConsistencyResult, DailyRecord, DateRange,
    DeviationRecord, GoalSet, PathExpectation, ProgressResult, QuotaBands,
    ThresholdConfig, empty_totals, normalize_number
)

__all__ = [
    "aggregate",
    "aggregate_by_user",
    "average_per_entry",
    "combine_totals",
    "check_consistency",
    "check_plan_consistency",
    "delta_color",
    "delta_percent",
    "signed_delta_percent",
    "top_deviations",
    "color_band",
    "compute_progress",
    "progress_for_goals",
    "InvalidPeriodError",
    "ProjectionOverflowError",
    "build_path_expectations",
    "is_on_track",
    "monthly_share",
    "months_between",
    "project_expectation",
    "analyze_quotas",
    "classify_progress",
    "compute_quotas",
    "AggregateTotal",
    "ColorThresholds",
    "ConsistencyResult",
    "DailyRecord",
    "DateRange",
    "DeviationRecord",
    "GoalSet",
    "PathExpectation",
    "ProgressResult",
    "QuotaBands",
    "ThresholdConfig",
    "empty_totals",
    "normalize_number",
]
