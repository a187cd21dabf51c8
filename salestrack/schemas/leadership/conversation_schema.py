from typing import Dict, List, Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict
from salestrack.models.shared.enums import QuotaStatus
from salestrack.schemas.dashboard.progress_schema import ProgressItem
from salestrack.schemas.goals.annual_goals_schema import DeviationItem

class PartnerInfo(BaseModel):
    id: int
    full_name: str
    team_name: Optional[str] = None
    role: str

class QuotaAnalysisItem(BaseModel):
    quota: str
    own: float
    team: float
    delta_percent: float
    status: QuotaStatus
    message: str

    model_config = ConfigDict(from_attributes=True)

class WeeklyConversationResponse(BaseModel):
    partner: PartnerInfo
    week_start: date
    week_end: date
    entry_count: int
    totals: Dict[str, float]
    targets: Dict[str, float]
    progress: List[ProgressItem]
    strengths: List[str]
    weaknesses: List[str]
    quotas: Dict[str, float]
    team_averages: Dict[str, float]
    quota_analysis: List[QuotaAnalysisItem]
    conversation_points: List[str]
    agenda_snippets: List[str]
    quota_insights: List[str]
    goal_deviations: List[DeviationItem]
    highlight_yesterday: Optional[str] = None
    help_needed: Optional[str] = None
    improvement_today: Optional[str] = None

class ConversationCreate(BaseModel):
    notes: Optional[str] = None
    action_items: List[str] = []
    next_steps: List[str] = []

class ConversationResponse(ConversationCreate):
    id: int
    partner_id: int
    leader_id: int
    conversation_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
