from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import get_current_user, get_threshold_config, require_role
from salestrack.core.database import get_async_session
from salestrack.engine.types import ThresholdConfig
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import UserRole
from salestrack.schemas.alerts.alert_schema import AlertResolve, AlertResponse, AlertScanResult
from salestrack.services.alerts.alert_service import AlertService

router = APIRouter()

@router.get("", response_model=List[AlertResponse])
async def get_alerts(
    include_resolved: bool = Query(False),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Alerts assigned to the current user (all alerts for admins)"""
    service = AlertService(session)
    return await service.get_alerts(current_user, include_resolved)

@router.post("/scan", response_model=AlertScanResult)
async def scan_alerts(
    session: AsyncSession = Depends(get_async_session),
    config: ThresholdConfig = Depends(get_threshold_config),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    """Run the deviation scan now instead of waiting for the scheduled job"""
    service = AlertService(session, config)
    return await service.scan_goal_deviations()

@router.post("/{alert_id}/resolve", response_model=AlertResponse)
async def resolve_alert(
    alert_id: int,
    payload: AlertResolve,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    service = AlertService(session)
    return await service.resolve_alert(alert_id, current_user, payload.resolution_notes)
