import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.database import get_async_session
from salestrack.core.security import decode_access_token
from salestrack.engine.types import ThresholdConfig
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import UserRole
from salestrack.services.admin.config_service import ConfigService
from salestrack.services.auth.user_service import UserService

security = HTTPBearer()
logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_async_session)
) -> User:
    """Resolve the bearer token's ``sub`` to an active user"""
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid authentication credentials")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid authentication credentials")

    user = await UserService(session).get_user(user_id)
    if user is None or not user.is_active:
        raise _unauthorized("User not found or inactive")

    request.state.current_user = user
    return user


def require_role(*roles: UserRole):
    """
    Dependency to restrict an endpoint to the given roles

    Examples:
        require_role(UserRole.ADMIN)
        require_role(UserRole.LEADER, UserRole.ADMIN)
    """
    async def role_dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning(f"User {current_user.id} with role {current_user.role.value} denied; requires {[r.value for r in roles]}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required one of: {', '.join(r.value for r in roles)}"
            )
        return current_user

    return role_dependency


async def get_threshold_config(session: AsyncSession = Depends(get_async_session)) -> ThresholdConfig:
    """Thresholds are re-read per request so admin changes apply immediately"""
    return await ConfigService(session).get_threshold_config()
