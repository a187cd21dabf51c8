import math
from typing import Dict, Iterable, List, Mapping, Optional

from salestrack.engine.types import (
    AggregateTotal, DailyRecord, DateRange, Number, empty_totals, normalize_number
)
from salestrack.models.shared.enums import MetricKey


def _exact_sum(values: List[Number]) -> Number:
    # Integers add exactly; fsum makes float sums independent of order.
    if all(isinstance(value, int) for value in values):
        return sum(values)
    return math.fsum(values)


def _in_range(records: Optional[Iterable[DailyRecord]], date_range: DateRange) -> List[DailyRecord]:
    return [record for record in (records or []) if date_range.contains(record.entry_date)]


def _sum_records(records: List[DailyRecord]) -> AggregateTotal:
    return {
        metric: _exact_sum([record.value(metric) for record in records])
        for metric in MetricKey
    }


def aggregate(records: Optional[Iterable[DailyRecord]], date_range: DateRange) -> AggregateTotal:
    """Sum every metric over the records dated inside ``date_range`` (inclusive)."""
    selected = _in_range(records, date_range)
    if not selected:
        return empty_totals()
    return _sum_records(selected)


def aggregate_by_user(
    records: Optional[Iterable[DailyRecord]], date_range: DateRange
) -> Dict[Optional[int], AggregateTotal]:
    grouped: Dict[Optional[int], List[DailyRecord]] = {}
    for record in _in_range(records, date_range):
        grouped.setdefault(record.user_id, []).append(record)
    return {user_id: _sum_records(rows) for user_id, rows in grouped.items()}


def combine_totals(totals: Optional[Iterable[Mapping[MetricKey, Number]]]) -> AggregateTotal:
    """Team roll-up: pointwise sum of member totals."""
    members = list(totals or [])
    if not members:
        return empty_totals()
    return {
        metric: _exact_sum([normalize_number(member.get(metric)) for member in members])
        for metric in MetricKey
    }


def average_per_entry(records: Optional[Iterable[DailyRecord]], date_range: DateRange) -> Dict[MetricKey, float]:
    """Mean value per daily entry, 0 when there are no entries."""
    selected = _in_range(records, date_range)
    if not selected:
        return {metric: 0.0 for metric in MetricKey}
    totals = _sum_records(selected)
    return {metric: totals[metric] / len(selected) for metric in MetricKey}
