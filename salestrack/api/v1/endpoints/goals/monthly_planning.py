from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import get_threshold_config, require_role
from salestrack.core.database import get_async_session
from salestrack.core.exceptions import ValidationError
from salestrack.engine.types import ThresholdConfig
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import UserRole
from salestrack.schemas.common.pagination import ApiResponse
from salestrack.schemas.common.validators import validate_month
from salestrack.schemas.goals.monthly_planning_schema import MonthlyPlanningResponse, MonthlyPlanningSave
from salestrack.services.planning.monthly_planning_service import MonthlyPlanningService

router = APIRouter()

@router.get("", response_model=ApiResponse[MonthlyPlanningResponse])
async def get_monthly_planning(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    session: AsyncSession = Depends(get_async_session),
    config: ThresholdConfig = Depends(get_threshold_config),
    current_user: User = Depends(require_role(UserRole.LEADER, UserRole.ADMIN))
):
    """Own monthly goals, previous-month mirror and direct partners"""
    if month is not None:
        try:
            month = validate_month(month)
        except ValueError as e:
            raise ValidationError(str(e))
    service = MonthlyPlanningService(session, config)
    return {"success": True, "data": await service.get_planning(current_user, month)}

@router.post("", response_model=ApiResponse[MonthlyPlanningResponse])
async def save_monthly_planning(
    payload: MonthlyPlanningSave,
    session: AsyncSession = Depends(get_async_session),
    config: ThresholdConfig = Depends(get_threshold_config),
    current_user: User = Depends(require_role(UserRole.LEADER, UserRole.ADMIN))
):
    """Save own monthly goals and planning notes"""
    service = MonthlyPlanningService(session, config)
    data = await service.save_planning(current_user, payload)
    return {"success": True, "message": "Monthly planning saved", "data": data}
