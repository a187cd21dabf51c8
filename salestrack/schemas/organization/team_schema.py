from pydantic import BaseModel, ConfigDict, validator
from typing import Dict, Optional
from datetime import datetime

class TeamBase(BaseModel):
    name: str
    description: Optional[str] = None

class TeamCreate(TeamBase):
    @validator('name')
    def validate_name(cls, v):
        if not v or len(v.strip()) < 2:
            raise ValueError('Team name must be at least 2 characters')
        return v.strip()

class TeamResponse(TeamBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class WindowAverage(BaseModel):
    avg_short: float
    avg_long: float

class TeamAverageResponse(BaseModel):
    team_id: int
    team_name: str
    member_count: int
    entry_count: int
    metrics: Dict[str, WindowAverage]
    quotas: Dict[str, WindowAverage]
