import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from salestrack.core.exceptions import NotFoundError, ValidationError
from salestrack.core.logging import log_user_action
from salestrack.models.auth.user import User
from salestrack.models.organization.team import Team
from salestrack.models.shared.enums import UserRole
from salestrack.schemas.auth.user_schema import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


def can_view_user(viewer: User, target: User) -> bool:
    """Users see themselves, leaders see their direct partners, admins see everyone."""
    return is_admin(viewer) or viewer.id == target.id or target.parent_leader_id == viewer.id


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.team))
            .where(
                User.id == user_id,
                User.is_deleted == False
            )
        )
        return result.scalar_one_or_none()

    async def get_user_or_404(self, user_id: int) -> User:
        user = await self.get_user(user_id)
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(
                User.email == email,
                User.is_deleted == False
            )
        )
        return result.scalar_one_or_none()

    async def get_users(
        self,
        page_index: int = 1,
        page_size: int = 100,
        team_id: Optional[int] = None,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None
    ) -> Dict[str, Any]:
        conditions = [User.is_deleted == False]
        if team_id is not None:
            conditions.append(User.team_id == team_id)
        if role is not None:
            conditions.append(User.role == role)
        if is_active is not None:
            conditions.append(User.is_active == is_active)

        total_count = await self.db.scalar(select(func.count(User.id)).where(*conditions))
        skip = (page_index - 1) * page_size
        users = await self.db.scalars(
            select(User)
            .where(*conditions)
            .order_by(User.full_name)
            .offset(skip)
            .limit(page_size)
        )
        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total_count or 0,
            "data": users.all()
        }

    async def get_partners(self, leader_id: int, active_only: bool = True) -> List[User]:
        """Direct partners of a leader, with their team loaded."""
        conditions = [User.parent_leader_id == leader_id, User.is_deleted == False]
        if active_only:
            conditions.append(User.is_active == True)
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.team))
            .where(*conditions)
            .order_by(User.full_name)
        )
        return list(result.scalars().all())

    async def get_team_members(self, team_id: int) -> List[User]:
        result = await self.db.execute(
            select(User).where(
                User.team_id == team_id,
                User.is_active == True,
                User.is_deleted == False
            ).order_by(User.full_name)
        )
        return list(result.scalars().all())

    async def get_active_users(self) -> List[User]:
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.team))
            .where(User.is_active == True, User.is_deleted == False)
            .order_by(User.id)
        )
        return list(result.scalars().all())

    async def _check_references(self, team_id: Optional[int], parent_leader_id: Optional[int], user_id: Optional[int] = None):
        if team_id is not None:
            team = await self.db.scalar(select(Team.id).where(Team.id == team_id, Team.is_deleted == False))
            if team is None:
                raise ValidationError(f"Team with ID {team_id} does not exist")
        if parent_leader_id is not None:
            if user_id is not None and parent_leader_id == user_id:
                raise ValidationError("A user cannot be their own leader")
            leader = await self.get_user(parent_leader_id)
            if leader is None:
                raise ValidationError(f"Leader with ID {parent_leader_id} does not exist")

    async def create_user(self, user_data: UserCreate, current_user_id: int) -> User:
        try:
            if await self.get_user_by_email(user_data.email):
                raise ValidationError(f"Email {user_data.email} is already registered")
            await self._check_references(user_data.team_id, user_data.parent_leader_id)

            user = User(**user_data.dict(), is_active=True, created_by=current_user_id)
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)

            log_user_action(current_user_id, "CREATE", "user", user.id)
            return user

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error creating user: {str(e)}")
            raise

    async def update_user(self, user_id: int, user_data: UserUpdate, current_user_id: int) -> User:
        user = await self.get_user_or_404(user_id)
        update_data = user_data.dict(exclude_unset=True)

        try:
            await self._check_references(
                update_data.get("team_id"), update_data.get("parent_leader_id"), user_id=user_id
            )
            for field, value in update_data.items():
                setattr(user, field, value)
            user.updated_by = current_user_id

            await self.db.commit()
            await self.db.refresh(user)

            log_user_action(current_user_id, "UPDATE", "user", user.id)
            return user

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error updating user {user_id}: {str(e)}")
            raise
