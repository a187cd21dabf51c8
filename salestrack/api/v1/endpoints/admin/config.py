from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import require_role
from salestrack.core.database import get_async_session
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import UserRole
from salestrack.schemas.admin.config_schema import ConfigResponse, ConfigUpdate
from salestrack.services.admin.config_service import ConfigService, default_config

router = APIRouter()

@router.get("", response_model=ConfigResponse)
async def get_config(
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    """Effective thresholds (stored overrides merged over defaults)"""
    service = ConfigService(session)
    return {"success": True, "data": await service.get_config(), "defaults": default_config()}

@router.put("", response_model=ConfigResponse)
async def update_config(
    payload: ConfigUpdate,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    """Override one or more thresholds"""
    service = ConfigService(session)
    data = await service.update_configs(payload.configs, current_user.id)
    return {"success": True, "data": data, "defaults": default_config()}

@router.delete("/{key}", response_model=ConfigResponse)
async def delete_config(
    key: str,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    """Drop an override so the default applies again"""
    service = ConfigService(session)
    data = await service.delete_config(key.strip().lower(), current_user.id)
    return {"success": True, "data": data, "defaults": default_config()}
