from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import require_role
from salestrack.core.database import get_async_session
from salestrack.core.exceptions import PermissionDeniedError
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import UserRole
from salestrack.schemas.common.pagination import ApiResponse
from salestrack.schemas.goals.annual_goals_schema import AnnualGoalsResponse, AnnualGoalsSave
from salestrack.services.admin.config_service import ConfigService, build_threshold_config
from salestrack.services.auth.user_service import UserService, can_view_user
from salestrack.services.goals.annual_goals_service import AnnualGoalsService

router = APIRouter()

async def _service(session: AsyncSession) -> AnnualGoalsService:
    values = await ConfigService(session).get_config()
    return AnnualGoalsService(session, build_threshold_config(values), lock_days=values["lock_days"])

@router.get("", response_model=ApiResponse[AnnualGoalsResponse])
async def get_annual_goals(
    cycle: Optional[str] = Query(None, description="Planning cycle label"),
    user_id: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.LEADER, UserRole.ADMIN))
):
    """Annual goals overview for a cycle"""
    target = await UserService(session).get_user_or_404(user_id or current_user.id)
    if not can_view_user(current_user, target):
        raise PermissionDeniedError("Not allowed to view this user's annual goals")
    service = await _service(session)
    return {"success": True, "data": await service.get_overview(current_user, target, cycle)}

@router.post("", response_model=ApiResponse[AnnualGoalsResponse])
async def save_annual_goals(
    payload: AnnualGoalsSave,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.LEADER, UserRole.ADMIN))
):
    """Run one step of the annual planning workflow (1 baseline, 2 goals, 3 plan months, 4 finalise)"""
    target = await UserService(session).get_user_or_404(payload.user_id or current_user.id)
    service = await _service(session)
    data = await service.save_step(current_user, target, payload)
    return {"success": True, "message": f"Step {payload.step} saved", "data": data}
