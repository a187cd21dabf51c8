from typing import Dict, List, Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, validator
from salestrack.models.shared.enums import ColorBand, DeviationSeverity, MetricKey
from salestrack.schemas.common.validators import validate_month

class CycleInfo(BaseModel):
    label: str
    start: date
    end: date
    baseline_cutoff: date

class DeviationItem(BaseModel):
    metric: MetricKey
    metric_label: str
    value_a: float
    value_b: float
    delta_percent: float
    severity: DeviationSeverity

    model_config = ConfigDict(from_attributes=True)

class ConsistencyCheck(BaseModel):
    is_consistent: bool
    tolerance_percent: float
    deviations: List[DeviationItem]

    model_config = ConfigDict(from_attributes=True)

class PathExpectationItem(BaseModel):
    metric: MetricKey
    target: float
    expected_to_date: int
    actual_to_date: float
    on_track: bool

    model_config = ConfigDict(from_attributes=True)

class PlanMonth(BaseModel):
    month: str  # YYYY-MM
    targets: Dict[MetricKey, float] = {}

    @validator('month')
    def check_month(cls, v):
        return validate_month(v)

class TeamOverviewRow(BaseModel):
    user_id: int
    full_name: str
    team_name: Optional[str] = None
    self_goals: Dict[str, float]
    fk_goals: Dict[str, float]
    baseline: Dict[str, float]
    current_actuals: Dict[str, float]
    path_expectation: List[PathExpectationItem]
    on_track: bool
    delta: int
    color: ColorBand

class AnnualGoalsResponse(BaseModel):
    user_id: int
    current_cycle: CycleInfo
    baseline: Dict[str, float]
    baseline_source: str  # snapshot | entries
    baseline_editable: bool
    self_goals: Dict[str, float]
    fk_goals: Dict[str, float]
    fk_comment: Optional[str] = None
    plan_months: List[PlanMonth]
    consistency_check: ConsistencyCheck
    plan_consistency: ConsistencyCheck
    team_overview: List[TeamOverviewRow]
    is_locked: bool
    lock_expiry: Optional[datetime] = None

class AnnualGoalsSave(BaseModel):
    cycle: str
    step: int
    user_id: Optional[int] = None
    baseline: Optional[Dict[MetricKey, float]] = None
    self_goals: Optional[Dict[MetricKey, float]] = None
    fk_goals: Optional[Dict[MetricKey, float]] = None
    fk_comment: Optional[str] = None
    plan_months: Optional[List[PlanMonth]] = None
