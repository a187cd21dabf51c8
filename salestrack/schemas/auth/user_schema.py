from pydantic import BaseModel, ConfigDict, EmailStr, validator
from typing import Optional
from datetime import datetime
from salestrack.models.shared.enums import UserRole

class UserBase(BaseModel):
    email: EmailStr
    full_name: str
    role: UserRole = UserRole.ADVISOR
    team_id: Optional[int] = None
    parent_leader_id: Optional[int] = None
    is_team_leader: bool = False

class UserCreate(UserBase):
    @validator('full_name')
    def validate_full_name(cls, v):
        if not v or len(v.strip()) < 2:
            raise ValueError('Name must be at least 2 characters')
        return v.strip()

class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    role: Optional[UserRole] = None
    team_id: Optional[int] = None
    parent_leader_id: Optional[int] = None
    is_team_leader: Optional[bool] = None
    is_active: Optional[bool] = None

class UserResponse(UserBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
