from pydantic import BaseModel, ConfigDict, validator
from typing import Dict, Optional
from datetime import date, datetime
from salestrack.engine.types import normalize_number

COUNT_FIELDS = (
    'fa', 'new_appointments', 'recommendations', 'tiv_invitations',
    'taa_invitations', 'tgs_registrations', 'bav_checks',
)

class DailyEntryBase(BaseModel):
    entry_date: date
    fa: int = 0
    eh: float = 0
    new_appointments: int = 0
    recommendations: int = 0
    tiv_invitations: int = 0
    taa_invitations: int = 0
    tgs_registrations: int = 0
    bav_checks: int = 0
    highlight_yesterday: Optional[str] = None
    help_needed: Optional[str] = None
    improvement_today: Optional[str] = None
    focus_area: Optional[str] = None
    weekday_answers: Dict[int, str] = {}

    @validator('weekday_answers', pre=True)
    def drop_blank_answers(cls, v):
        if not isinstance(v, dict):
            return v or {}
        return {key: value for key, value in v.items() if value is not None and str(value).strip()}

    @validator('weekday_answers')
    def check_answer_indices(cls, v):
        if any(index < 0 for index in v):
            raise ValueError("Answer indices must not be negative")
        return v

class DailyEntryCreate(DailyEntryBase):
    # Dashboard entry favours availability: bad numbers become 0 instead of a 422
    @validator(*COUNT_FIELDS, pre=True)
    def normalize_count(cls, v):
        return int(normalize_number(v))

    @validator('eh', pre=True)
    def normalize_eh(cls, v):
        return float(normalize_number(v))

class DailyEntryResponse(DailyEntryBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
