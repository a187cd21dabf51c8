from typing import Dict, List, Optional
from datetime import date
from pydantic import BaseModel, ConfigDict
from salestrack.models.shared.enums import ColorBand, GoalPeriod, MetricKey

class ProgressItem(BaseModel):
    metric: Optional[MetricKey] = None
    achieved: float
    target: float
    percentage: float
    bar_width: float
    color_band: ColorBand

    model_config = ConfigDict(from_attributes=True)

class UserProgressResponse(BaseModel):
    user_id: int
    period: GoalPeriod
    start: date
    end: date
    totals: Dict[str, float]
    progress: List[ProgressItem]

class MemberProgress(BaseModel):
    user_id: int
    full_name: str
    totals: Dict[str, float]
    progress: List[ProgressItem]

class TeamProgressResponse(BaseModel):
    team_id: int
    team_name: str
    period: GoalPeriod
    start: date
    end: date
    totals: Dict[str, float]
    targets: Dict[str, float]
    progress: List[ProgressItem]
    members: List[MemberProgress]

class HelpRequest(BaseModel):
    user_id: int
    full_name: str
    entry_date: date
    help_needed: str

class TeamRadarTeam(TeamProgressResponse):
    help_requests: List[HelpRequest] = []

class TeamRadarResponse(BaseModel):
    timeframe: GoalPeriod
    start: date
    end: date
    teams: List[TeamRadarTeam]
    overall_totals: Dict[str, float]
    overall_targets: Dict[str, float]
    overall_progress: List[ProgressItem]
