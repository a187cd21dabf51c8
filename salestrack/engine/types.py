"""Value objects consumed and produced by the progress engine.

Everything here is immutable and free of database or HTTP concerns. Service
classes convert ORM rows into these objects before calling the engine.
"""
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from salestrack.models.shared.enums import (
    ColorBand, DeviationSeverity, GoalAuthor, GoalPeriod, MetricKey, QuotaStatus
)

Number = Union[int, float]
AggregateTotal = Dict[MetricKey, Number]


def normalize_number(value: Any) -> Number:
    """Coerce anything into a non-negative finite number.

    None, non-numeric values, NaN, infinities and negatives become 0.
    Integers (and integral strings) stay integers.
    """
    if value is None or isinstance(value, bool):
        return int(value or 0)
    if isinstance(value, int):
        return value if value > 0 else 0
    if isinstance(value, str):
        value = value.strip()
        try:
            return normalize_number(int(value))
        except ValueError:
            pass
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number) or number <= 0:
        return 0
    return number


def coerce_metric(key: Union[MetricKey, str]) -> Optional[MetricKey]:
    """Map a metric name to its MetricKey, or None for unknown names."""
    if isinstance(key, MetricKey):
        return key
    try:
        return MetricKey(str(key).lower())
    except ValueError:
        return None


def _metric_mapping(values: Optional[Mapping[Any, Any]]) -> Dict[MetricKey, Number]:
    result: Dict[MetricKey, Number] = {}
    for key, value in (values or {}).items():
        metric = coerce_metric(key)
        if metric is not None:
            result[metric] = normalize_number(value)
    return result


def empty_totals() -> AggregateTotal:
    return {metric: 0 for metric in MetricKey}


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class DailyRecord:
    """One (user, day) row of activity counters."""
    user_id: Optional[int]
    entry_date: date
    counts: Mapping[MetricKey, Number] = field(default_factory=dict)
    highlight: Optional[str] = None
    help_needed: Optional[str] = None
    improvement_note: Optional[str] = None

    @classmethod
    def from_counts(cls, user_id: Optional[int], entry_date: date, counts: Mapping[Any, Any], **text) -> "DailyRecord":
        return cls(user_id=user_id, entry_date=entry_date, counts=_metric_mapping(counts), **text)

    def value(self, metric: MetricKey) -> Number:
        return normalize_number(self.counts.get(metric))


@dataclass(frozen=True)
class GoalSet:
    """Targets per metric for one period, authored by the advisor or the FK."""
    period: GoalPeriod = GoalPeriod.MONTHLY
    author: GoalAuthor = GoalAuthor.SELF
    targets: Mapping[MetricKey, Number] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls,
        targets: Optional[Mapping[Any, Any]],
        period: GoalPeriod = GoalPeriod.MONTHLY,
        author: GoalAuthor = GoalAuthor.SELF,
    ) -> "GoalSet":
        return cls(period=period, author=author, targets=_metric_mapping(targets))

    def target(self, metric: MetricKey) -> Number:
        return normalize_number(self.targets.get(metric))

    def has(self, metric: MetricKey) -> bool:
        return metric in self.targets

    def as_dict(self) -> Dict[str, Number]:
        return {metric.value: self.target(metric) for metric in MetricKey}


@dataclass(frozen=True)
class ColorThresholds:
    """Lower bounds (in percent) of the Ampel bands; red is everything below yellow."""
    yellow: float = 30
    green: float = 80
    diamond: Optional[float] = None

    def ordered_bands(self) -> Tuple[Tuple[float, ColorBand], ...]:
        bands = []
        if self.diamond is not None:
            bands.append((self.diamond, ColorBand.DIAMOND))
        bands.append((self.green, ColorBand.GREEN))
        bands.append((self.yellow, ColorBand.YELLOW))
        return tuple(sorted(bands, key=lambda band: band[0], reverse=True))


@dataclass(frozen=True)
class QuotaBands:
    """Signed percentage deltas vs. the team average."""
    warning: float = 10
    critical: float = 20
    excellent: float = 20


@dataclass(frozen=True)
class ThresholdConfig:
    progress: ColorThresholds = field(default_factory=ColorThresholds)
    mirror: ColorThresholds = field(default_factory=lambda: ColorThresholds(yellow=50, green=80))
    deviation_tolerance_percent: float = 25
    deviation_red_percent: float = 50
    plan_consistency_tolerance: float = 2
    on_track_factor: float = 0.9
    target_increase_threshold: float = 25
    previous_month_miss_threshold: float = 80
    strength_at: float = 100
    weakness_below: float = 50
    quota_bands: QuotaBands = field(default_factory=QuotaBands)
    min_tiv_per_fa: float = 0.4
    min_tgs_per_tiv: float = 0.2
    min_recommendations_per_fa: float = 1.0
    min_bav_per_fa: float = 0.5


@dataclass(frozen=True)
class ProgressResult:
    metric: Optional[MetricKey]
    achieved: Number
    target: Number
    percentage: float
    color_band: ColorBand

    @property
    def bar_width(self) -> float:
        return min(self.percentage, 100.0)


@dataclass(frozen=True)
class DeviationRecord:
    metric: MetricKey
    metric_label: str
    value_a: Number
    value_b: Number
    delta_percent: float
    severity: DeviationSeverity


@dataclass(frozen=True)
class ConsistencyResult:
    is_consistent: bool
    tolerance_percent: float
    deviations: Tuple[DeviationRecord, ...] = ()


@dataclass(frozen=True)
class PathExpectation:
    metric: MetricKey
    target: Number
    expected_to_date: int
    actual_to_date: Number
    on_track: bool


@dataclass(frozen=True)
class QuotaAnalysis:
    quota: str
    own: float
    team: float
    delta_percent: float
    status: QuotaStatus
    message: str
