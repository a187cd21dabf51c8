from pydantic import BaseModel, validator
from typing import Dict, List, Optional
from datetime import date
from salestrack.engine.types import normalize_number
from salestrack.models.shared.enums import GoalAuthor, GoalPeriod, MetricKey
from salestrack.schemas.dashboard.progress_schema import ProgressItem

class GoalSetSave(BaseModel):
    user_id: Optional[int] = None      # defaults to the current user
    period: GoalPeriod
    period_start: date
    author: GoalAuthor = GoalAuthor.SELF
    targets: Dict[MetricKey, float] = {}
    comment: Optional[str] = None

    @validator('targets', pre=True)
    def normalize_targets(cls, v):
        return {key: float(normalize_number(value)) for key, value in (v or {}).items()}

class GoalSetResponse(BaseModel):
    user_id: int
    period: GoalPeriod
    period_start: date
    author: GoalAuthor
    targets: Dict[str, float]
    comment: Optional[str] = None

class WeeklyReviewSave(BaseModel):
    week_start: date                   # any day of the week; stored as its Monday
    goal_achieved: bool
    completion_notes: Optional[str] = None
    next_week_focus: Optional[str] = None

class WeeklyReviewResponse(BaseModel):
    user_id: int
    week_start: date
    week_end: date
    targets: Dict[str, float]
    totals: Dict[str, float]
    progress: List[ProgressItem]
    targets_met: bool
    is_reviewed: bool
    goal_achieved: Optional[bool] = None
    completion_notes: Optional[str] = None
    next_week_focus: Optional[str] = None
