from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import get_current_user, require_role
from salestrack.core.database import get_async_session
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import UserRole
from salestrack.schemas.auth.user_schema import UserCreate, UserResponse, UserUpdate
from salestrack.schemas.common.pagination import PaginatedResponse
from salestrack.services.auth.user_service import UserService

router = APIRouter()

@router.post("", response_model=UserResponse)
async def create_user(
    user: UserCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    """Register a user known to the identity provider"""
    service = UserService(session)
    return await service.create_user(user, current_user.id)

@router.get("", response_model=PaginatedResponse[UserResponse])
async def get_users(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    team_id: Optional[int] = Query(None),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.LEADER, UserRole.ADMIN))
):
    service = UserService(session)
    return await service.get_users(
        page_index=page_index,
        page_size=page_size,
        team_id=team_id,
        role=role,
        is_active=is_active
    )

@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user

@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    user: UserUpdate,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    """Update role, team or leader assignment"""
    service = UserService(session)
    return await service.update_user(user_id, user, current_user.id)
