from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import get_current_user, require_role
from salestrack.core.database import get_async_session
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import UserRole
from salestrack.schemas.organization.team_schema import TeamAverageResponse, TeamCreate, TeamResponse
from salestrack.services.organization.team_service import TeamService

router = APIRouter()

@router.post("", response_model=TeamResponse)
async def create_team(
    team: TeamCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    service = TeamService(session)
    return await service.create_team(team, current_user.id)

@router.get("", response_model=List[TeamResponse])
async def get_teams(
    is_active: Optional[bool] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    service = TeamService(session)
    return await service.get_teams(is_active)

@router.get("/averages", response_model=List[TeamAverageResponse])
async def get_team_averages(
    as_of: Optional[date] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.LEADER, UserRole.ADMIN))
):
    """Per-entry averages over the short and long windows for every active team"""
    service = TeamService(session)
    return await service.get_team_averages(as_of)
