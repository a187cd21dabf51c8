from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import require_role
from salestrack.core.database import get_async_session
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import UserRole
from salestrack.schemas.admin.integrity_schema import IntegrityIssue
from salestrack.schemas.common.pagination import ApiResponse
from salestrack.services.admin.integrity_service import IntegrityService

router = APIRouter()

@router.get("", response_model=ApiResponse[List[IntegrityIssue]])
async def integrity_check(
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    """Data integrity issues across goals, entries and teams"""
    service = IntegrityService(session)
    return {"success": True, "data": await service.check()}
