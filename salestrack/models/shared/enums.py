from enum import Enum

# Enums
class MetricKey(str, Enum):
    FA = "fa"                                  # Finanzanalyse
    EH = "eh"                                  # Unit/point volume
    NEW_APPOINTMENTS = "new_appointments"
    RECOMMENDATIONS = "recommendations"
    TIV_INVITATIONS = "tiv_invitations"
    TAA_INVITATIONS = "taa_invitations"
    TGS_REGISTRATIONS = "tgs_registrations"
    BAV_CHECKS = "bav_checks"                  # Occupational pension check

    @property
    def label(self) -> str:
        return METRIC_LABELS[self]


METRIC_LABELS = {
    MetricKey.FA: "FA",
    MetricKey.EH: "EH",
    MetricKey.NEW_APPOINTMENTS: "New appointments",
    MetricKey.RECOMMENDATIONS: "Recommendations",
    MetricKey.TIV_INVITATIONS: "TIV invitations",
    MetricKey.TAA_INVITATIONS: "TAA invitations",
    MetricKey.TGS_REGISTRATIONS: "TGS registrations",
    MetricKey.BAV_CHECKS: "bAV checks",
}

class GoalPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

class GoalAuthor(str, Enum):
    SELF = "self"
    MANAGER = "fk"      # Führungskraft

class ColorBand(str, Enum):
    NO_TARGET = "no_target"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    DIAMOND = "diamond"

class DeviationSeverity(str, Enum):
    YELLOW = "yellow"
    RED = "red"

class QuotaStatus(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    GOOD = "good"
    EXCELLENT = "excellent"

class UserRole(str, Enum):
    ADVISOR = "advisor"
    LEADER = "leader"
    ADMIN = "admin"

class AlertType(str, Enum):
    GOAL_DEVIATION = "GOAL_DEVIATION"
    OFF_TRACK = "OFF_TRACK"

class AlertSeverity(str, Enum):
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
