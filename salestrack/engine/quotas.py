from typing import Any, Dict, List, Mapping, Optional, Tuple

from salestrack.engine.types import (
    ProgressResult, QuotaAnalysis, QuotaBands, normalize_number
)
from salestrack.models.shared.enums import ColorBand, MetricKey, QuotaStatus

# quota name -> (numerator, denominator)
QUOTA_DEFINITIONS: Dict[str, Tuple[MetricKey, MetricKey]] = {
    "appointments_per_fa": (MetricKey.NEW_APPOINTMENTS, MetricKey.FA),
    "recommendations_per_fa": (MetricKey.RECOMMENDATIONS, MetricKey.FA),
    "tiv_per_fa": (MetricKey.TIV_INVITATIONS, MetricKey.FA),
    "tgs_per_tiv": (MetricKey.TGS_REGISTRATIONS, MetricKey.TIV_INVITATIONS),
    "bav_per_fa": (MetricKey.BAV_CHECKS, MetricKey.FA),
}

QUOTA_MESSAGES = {
    QuotaStatus.CRITICAL: "Quota well below team average - support needed",
    QuotaStatus.WARNING: "Quota slightly below team average - room for improvement",
    QuotaStatus.GOOD: "Quota in line with team average",
    QuotaStatus.EXCELLENT: "Quota well above team average - share best practice",
}


def ratio(numerator: Any, denominator: Any) -> float:
    denominator = normalize_number(denominator)
    if denominator == 0:
        return 0.0
    return normalize_number(numerator) / denominator


def compute_quotas(totals: Mapping[MetricKey, Any]) -> Dict[str, float]:
    return {
        name: ratio(totals.get(numerator), totals.get(denominator))
        for name, (numerator, denominator) in QUOTA_DEFINITIONS.items()
    }


def classify_quota(delta: float, bands: QuotaBands) -> QuotaStatus:
    if delta < -bands.critical:
        return QuotaStatus.CRITICAL
    if delta < -bands.warning:
        return QuotaStatus.WARNING
    if delta > bands.excellent:
        return QuotaStatus.EXCELLENT
    return QuotaStatus.GOOD


def analyze_quotas(
    own: Mapping[str, float],
    team: Mapping[str, float],
    bands: Optional[QuotaBands] = None,
) -> Dict[str, QuotaAnalysis]:
    """Compare each own quota with the team average (signed percent delta)."""
    bands = bands or QuotaBands()
    analysis = {}
    for name in QUOTA_DEFINITIONS:
        own_value = float(normalize_number(own.get(name)))
        team_value = float(normalize_number(team.get(name)))
        delta = (own_value - team_value) / team_value * 100 if team_value > 0 else 0.0
        status = classify_quota(delta, bands)
        analysis[name] = QuotaAnalysis(
            quota=name,
            own=own_value,
            team=team_value,
            delta_percent=delta,
            status=status,
            message=QUOTA_MESSAGES[status],
        )
    return analysis


def classify_progress(
    results: List[ProgressResult],
    strength_at: float = 100,
    weakness_below: float = 50,
) -> Tuple[List[MetricKey], List[MetricKey]]:
    """Split metrics with a target into strengths and weaknesses."""
    strengths, weaknesses = [], []
    for result in results:
        if result.color_band == ColorBand.NO_TARGET or result.metric is None:
            continue
        if result.percentage >= strength_at:
            strengths.append(result.metric)
        elif result.percentage < weakness_below:
            weaknesses.append(result.metric)
    return strengths, weaknesses
