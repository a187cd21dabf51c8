from typing import Dict, List, Optional
from pydantic import BaseModel, validator
from salestrack.models.shared.enums import ColorBand, MetricKey
from salestrack.schemas.common.validators import validate_month
from salestrack.schemas.dashboard.progress_schema import ProgressItem

FOCUS_AREAS = ["New clients", "Recommendations", "TIV", "TGS", "bAV", "Quality/Process"]

class GoalPair(BaseModel):
    self_target: float
    fk_target: float

class PartnerPlanningRow(BaseModel):
    user_id: int
    full_name: str
    team_name: Optional[str] = None
    self_goals: Dict[str, float]
    fk_goals: Dict[str, float]
    previous_month_actual: Dict[str, float]
    current_month_actual: Dict[str, float]
    delta: int
    color: ColorBand
    kpis: Dict[str, GoalPair]
    quotas: Dict[str, float]

class MonthlyPlanningResponse(BaseModel):
    current_month: str
    previous_month: str
    own_goals: Dict[str, float]
    previous_month_mirror: List[ProgressItem]
    direct_partners: List[PartnerPlanningRow]
    validation_messages: List[str]
    focus_areas: List[str] = FOCUS_AREAS
    previous_month_missed_reason: Optional[str] = None
    target_increase_reason: Optional[str] = None
    focus_area: Optional[str] = None

class MonthlyPlanningSave(BaseModel):
    month: str
    goals: Dict[MetricKey, float] = {}
    previous_month_missed_reason: Optional[str] = None
    target_increase_reason: Optional[str] = None
    focus_area: Optional[str] = None

    @validator('month')
    def check_month(cls, v):
        return validate_month(v)
