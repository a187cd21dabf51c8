"""Heuristic coaching hints as declarative (predicate, message) rules.

Rules only read an already computed ``InsightContext``; adding a hint means
appending a rule, not editing a conditional chain.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from salestrack.engine.types import AggregateTotal, QuotaAnalysis, ThresholdConfig
from salestrack.models.shared.enums import MetricKey, QuotaStatus


@dataclass(frozen=True)
class InsightContext:
    totals: AggregateTotal
    quotas: Mapping[str, float]
    quota_analysis: Mapping[str, QuotaAnalysis] = field(default_factory=dict)
    entry_count: int = 0
    config: ThresholdConfig = field(default_factory=ThresholdConfig)


@dataclass(frozen=True)
class InsightRule:
    key: str
    predicate: Callable[[InsightContext], bool]
    message: str
    severity: str = "info"


@dataclass(frozen=True)
class Insight:
    key: str
    message: str
    severity: str


def _has_activity(ctx: InsightContext) -> bool:
    return ctx.totals.get(MetricKey.FA, 0) > 0


def _quota_critical(name: str) -> Callable[[InsightContext], bool]:
    def predicate(ctx: InsightContext) -> bool:
        analysis = ctx.quota_analysis.get(name)
        return analysis is not None and analysis.status == QuotaStatus.CRITICAL
    return predicate


QUOTA_HEURISTICS: List[InsightRule] = [
    InsightRule(
        "tiv_per_fa_low",
        lambda ctx: _has_activity(ctx) and ctx.quotas.get("tiv_per_fa", 0) < ctx.config.min_tiv_per_fa,
        "TIV/FA too low - network building too weak",
        "warning",
    ),
    InsightRule(
        "tgs_per_tiv_low",
        lambda ctx: ctx.totals.get(MetricKey.TIV_INVITATIONS, 0) > 0
        and ctx.quotas.get("tgs_per_tiv", 0) < ctx.config.min_tgs_per_tiv,
        "TGS/TIV too low - conversion too weak",
        "warning",
    ),
    InsightRule(
        "recommendations_per_fa_low",
        lambda ctx: _has_activity(ctx)
        and ctx.quotas.get("recommendations_per_fa", 0) < ctx.config.min_recommendations_per_fa,
        "Recommendations/FA below 1 - recommendation conversation weak",
        "warning",
    ),
    InsightRule(
        "bav_per_fa_low",
        lambda ctx: _has_activity(ctx) and ctx.quotas.get("bav_per_fa", 0) < ctx.config.min_bav_per_fa,
        "bAV/FA too low - quality anchor missing",
        "warning",
    ),
]

PATTERN_RULES: List[InsightRule] = [
    InsightRule(
        "fa_without_recommendations",
        lambda ctx: _has_activity(ctx) and ctx.totals.get(MetricKey.RECOMMENDATIONS, 0) == 0,
        "FA numbers without any recommendations - how can we improve the transfer?",
    ),
    InsightRule(
        "appointments_without_tiv",
        lambda ctx: ctx.totals.get(MetricKey.NEW_APPOINTMENTS, 0) > 0
        and ctx.totals.get(MetricKey.TIV_INVITATIONS, 0) == 0,
        "Appointments are not leading to TIV - how can we raise conversation quality?",
    ),
    InsightRule(
        "no_entries",
        lambda ctx: ctx.entry_count == 0,
        "No daily entries this period - is something blocking data entry?",
    ),
]

AGENDA_RULES: List[InsightRule] = [
    InsightRule("agenda_appointments_per_fa", _quota_critical("appointments_per_fa"),
                "Optimise appointments per FA - discuss quality vs. quantity"),
    InsightRule("agenda_recommendations_per_fa", _quota_critical("recommendations_per_fa"),
                "Strengthen recommendation conversations - practise transfer techniques"),
    InsightRule("agenda_tiv_per_fa", _quota_critical("tiv_per_fa"),
                "Improve TIV quota - approach network building strategically"),
    InsightRule("agenda_tgs_per_tiv", _quota_critical("tgs_per_tiv"),
                "Increase TGS conversion - tighten follow-up processes"),
    InsightRule("agenda_bav_per_fa", _quota_critical("bav_per_fa"),
                "Increase bAV checks - strengthen the quality anchor"),
]


def evaluate_rules(rules: Sequence[InsightRule], context: InsightContext) -> List[Insight]:
    return [
        Insight(key=rule.key, message=rule.message, severity=rule.severity)
        for rule in rules
        if rule.predicate(context)
    ]


def quota_insights(analysis: Mapping[str, QuotaAnalysis]) -> List[str]:
    """One line per quota that is not simply 'good'."""
    labels: Dict[QuotaStatus, Optional[str]] = {
        QuotaStatus.CRITICAL: "immediate action needed",
        QuotaStatus.WARNING: "room for improvement identified",
        QuotaStatus.EXCELLENT: "best practice for the team",
        QuotaStatus.GOOD: None,
    }
    lines = []
    for name, item in analysis.items():
        suffix = labels[item.status]
        if suffix is None:
            continue
        title = name.replace("_per_", "/").upper()
        lines.append(f"{title}: {item.own:.2f} vs. team {item.team:.2f} - {suffix}")
    return lines
