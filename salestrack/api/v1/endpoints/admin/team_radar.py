from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import get_threshold_config, require_role
from salestrack.core.database import get_async_session
from salestrack.engine.types import ThresholdConfig
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import GoalPeriod, UserRole
from salestrack.schemas.dashboard.progress_schema import TeamRadarResponse
from salestrack.services.dashboard.team_radar_service import TeamRadarService

router = APIRouter()

@router.get("", response_model=TeamRadarResponse)
async def get_team_radar(
    timeframe: GoalPeriod = Query(GoalPeriod.WEEKLY),
    as_of: Optional[date] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    config: ThresholdConfig = Depends(get_threshold_config),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    """All active teams side by side for the current week or month"""
    service = TeamRadarService(session, config)
    return await service.get_radar(timeframe, as_of)
