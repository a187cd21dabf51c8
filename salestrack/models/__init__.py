from salestrack.models.organization.team import Team
from salestrack.models.auth.user import User
from salestrack.models.tracking.daily_entry import DailyEntry
from salestrack.models.tracking.weekday_question import WeekdayQuestion
from salestrack.models.goals.goal_set import GoalSetRecord, GoalTarget
from salestrack.models.goals.baseline_snapshot import BaselineSnapshot
from salestrack.models.goals.plan_lock import PlanLock
from salestrack.models.goals.monthly_plan_note import MonthlyPlanNote
from salestrack.models.goals.weekly_goal_review import WeeklyGoalReview
from salestrack.models.leadership.conversation import LeadershipConversation
from salestrack.models.system.system_setting import SystemSetting
from salestrack.models.alerts.alert import Alert


__all__ = [
    "Team",
    "User",
    "DailyEntry",
    "WeekdayQuestion",
    "GoalSetRecord",
    "GoalTarget",
    "BaselineSnapshot",
    "PlanLock",
    "MonthlyPlanNote",
    "WeeklyGoalReview",
    "LeadershipConversation",
    "SystemSetting",
    "Alert",
]
