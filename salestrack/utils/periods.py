import calendar
from datetime import date, timedelta
from typing import List, Optional

from salestrack.engine.types import DateRange
from salestrack.models.shared.enums import GoalPeriod


def week_range(as_of: date) -> DateRange:
    """Monday to Sunday of the ISO week containing ``as_of``."""
    start = as_of - timedelta(days=as_of.weekday())
    return DateRange(start=start, end=start + timedelta(days=6))


def month_range(as_of: date) -> DateRange:
    last_day = calendar.monthrange(as_of.year, as_of.month)[1]
    return DateRange(start=as_of.replace(day=1), end=as_of.replace(day=last_day))


def year_range(as_of: date) -> DateRange:
    return DateRange(start=date(as_of.year, 1, 1), end=date(as_of.year, 12, 31))


def period_range(period: GoalPeriod, as_of: date) -> DateRange:
    if period == GoalPeriod.DAILY:
        return DateRange(start=as_of, end=as_of)
    if period == GoalPeriod.WEEKLY:
        return week_range(as_of)
    if period == GoalPeriod.MONTHLY:
        return month_range(as_of)
    return year_range(as_of)


def normalize_period_start(period: GoalPeriod, day: date) -> date:
    """Weekly goals start on Monday, monthly goals on the 1st; others are kept as given."""
    if period == GoalPeriod.WEEKLY:
        return week_range(day).start
    if period == GoalPeriod.MONTHLY:
        return day.replace(day=1)
    return day


def month_key(day: date) -> str:
    return f"{day.year}-{day.month:02d}"


def parse_month(key: str) -> date:
    year, month = key.split("-")
    return date(int(year), int(month), 1)


def add_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def previous_month(key: str) -> str:
    return month_key(add_months(parse_month(key), -1))


def iter_months(start: date, end: date) -> List[date]:
    """First days of every month from ``start``'s month through ``end``'s month."""
    months = []
    current = start.replace(day=1)
    while current <= end:
        months.append(current)
        current = add_months(current, 1)
    return months


def days_back(as_of: date, days: int, end: Optional[date] = None) -> DateRange:
    return DateRange(start=as_of - timedelta(days=days), end=end or as_of)
