from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import get_current_user, get_threshold_config, require_role
from salestrack.core.database import get_async_session
from salestrack.core.exceptions import PermissionDeniedError
from salestrack.engine.types import ThresholdConfig
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import GoalPeriod, UserRole
from salestrack.schemas.dashboard.progress_schema import TeamProgressResponse, UserProgressResponse
from salestrack.services.auth.user_service import UserService, can_view_user
from salestrack.services.dashboard.progress_service import ProgressService

router = APIRouter()

@router.get("/me", response_model=UserProgressResponse)
async def get_my_progress(
    period: GoalPeriod = Query(GoalPeriod.WEEKLY),
    as_of: Optional[date] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    config: ThresholdConfig = Depends(get_threshold_config),
    current_user: User = Depends(get_current_user)
):
    """Own progress for the period containing ``as_of`` (default today)"""
    service = ProgressService(session, config)
    return await service.get_user_progress(current_user.id, period, as_of)

@router.get("/users/{user_id}", response_model=UserProgressResponse)
async def get_user_progress(
    user_id: int,
    period: GoalPeriod = Query(GoalPeriod.WEEKLY),
    as_of: Optional[date] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    config: ThresholdConfig = Depends(get_threshold_config),
    current_user: User = Depends(get_current_user)
):
    """Progress of a direct partner (or any user for admins)"""
    target = await UserService(session).get_user_or_404(user_id)
    if not can_view_user(current_user, target):
        raise PermissionDeniedError("Not allowed to view this user's progress")
    service = ProgressService(session, config)
    return await service.get_user_progress(user_id, period, as_of)

@router.get("/team/{team_id}", response_model=TeamProgressResponse)
async def get_team_progress(
    team_id: int,
    period: GoalPeriod = Query(GoalPeriod.WEEKLY),
    as_of: Optional[date] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    config: ThresholdConfig = Depends(get_threshold_config),
    current_user: User = Depends(require_role(UserRole.LEADER, UserRole.ADMIN))
):
    """Team roll-up: member totals and targets summed"""
    service = ProgressService(session, config)
    return await service.get_team_progress(team_id, period, as_of)
