import logging
from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.exceptions import PermissionDeniedError
from salestrack.core.logging import log_user_action
from salestrack.engine.types import GoalSet, normalize_number
from salestrack.models.auth.user import User
from salestrack.models.goals.goal_set import GoalSetRecord, GoalTarget
from salestrack.models.shared.enums import GoalAuthor, GoalPeriod, MetricKey
from salestrack.services.auth.user_service import is_admin
from salestrack.utils.periods import normalize_period_start

logger = logging.getLogger(__name__)


def record_to_goal_set(record: Optional[GoalSetRecord], period: GoalPeriod, author: GoalAuthor) -> GoalSet:
    if record is None:
        return GoalSet(period=period, author=author)
    return GoalSet.from_mapping(
        {target.metric: target.target for target in record.targets if not target.is_deleted},
        period=record.period,
        author=record.author,
    )


def ensure_can_author(current_user: User, target_user: User, author: GoalAuthor):
    """Self goals belong to the user, FK goals to their direct leader; admins may write both."""
    if is_admin(current_user):
        return
    if author == GoalAuthor.SELF and current_user.id == target_user.id:
        return
    if author == GoalAuthor.MANAGER and target_user.parent_leader_id == current_user.id:
        return
    raise PermissionDeniedError(f"Not allowed to save {author.value} goals for user {target_user.id}")


class GoalService:
    """Goal sets are keyed by (user, period, period_start, author); saving replaces the targets."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_goal_record(
        self,
        user_id: int,
        period: GoalPeriod,
        period_start: date,
        author: GoalAuthor = GoalAuthor.SELF
    ) -> Optional[GoalSetRecord]:
        result = await self.db.execute(
            select(GoalSetRecord).where(
                GoalSetRecord.user_id == user_id,
                GoalSetRecord.period == period,
                GoalSetRecord.period_start == normalize_period_start(period, period_start),
                GoalSetRecord.author == author,
                GoalSetRecord.is_deleted == False
            )
        )
        return result.scalars().first()

    async def get_goal_set(
        self,
        user_id: int,
        period: GoalPeriod,
        period_start: date,
        author: GoalAuthor = GoalAuthor.SELF
    ) -> GoalSet:
        record = await self.get_goal_record(user_id, period, period_start, author)
        return record_to_goal_set(record, period, author)

    async def get_latest_goal_record(
        self,
        user_id: int,
        period: GoalPeriod,
        author: GoalAuthor,
        on_or_before: date
    ) -> Optional[GoalSetRecord]:
        """Most recent set whose period started on or before the given day."""
        result = await self.db.execute(
            select(GoalSetRecord).where(
                GoalSetRecord.user_id == user_id,
                GoalSetRecord.period == period,
                GoalSetRecord.author == author,
                GoalSetRecord.period_start <= on_or_before,
                GoalSetRecord.is_deleted == False
            ).order_by(GoalSetRecord.period_start.desc()).limit(1)
        )
        return result.scalars().first()

    async def get_latest_goal_set(
        self,
        user_id: int,
        period: GoalPeriod,
        author: GoalAuthor,
        on_or_before: date
    ) -> GoalSet:
        record = await self.get_latest_goal_record(user_id, period, author, on_or_before)
        return record_to_goal_set(record, period, author)

    async def get_goal_sets_for_users(
        self,
        user_ids: Iterable[int],
        period: GoalPeriod,
        period_start: date,
        author: GoalAuthor = GoalAuthor.SELF
    ) -> Dict[int, GoalSet]:
        """Goal sets keyed by user id; users without a stored set get an empty one."""
        user_ids = list(user_ids)
        goal_sets = {user_id: GoalSet(period=period, author=author) for user_id in user_ids}
        if not user_ids:
            return goal_sets

        result = await self.db.execute(
            select(GoalSetRecord).where(
                GoalSetRecord.user_id.in_(user_ids),
                GoalSetRecord.period == period,
                GoalSetRecord.period_start == normalize_period_start(period, period_start),
                GoalSetRecord.author == author,
                GoalSetRecord.is_deleted == False
            )
        )
        for record in result.scalars().all():
            goal_sets[record.user_id] = record_to_goal_set(record, period, author)
        return goal_sets

    async def get_monthly_goal_sets(
        self,
        user_id: int,
        start: date,
        end: date,
        author: GoalAuthor = GoalAuthor.SELF
    ) -> Dict[date, GoalSet]:
        """Monthly sets whose month starts within [start, end], keyed by month start."""
        result = await self.db.execute(
            select(GoalSetRecord).where(
                GoalSetRecord.user_id == user_id,
                GoalSetRecord.period == GoalPeriod.MONTHLY,
                GoalSetRecord.author == author,
                GoalSetRecord.period_start >= start,
                GoalSetRecord.period_start <= end,
                GoalSetRecord.is_deleted == False
            ).order_by(GoalSetRecord.period_start)
        )
        return {
            record.period_start: record_to_goal_set(record, GoalPeriod.MONTHLY, author)
            for record in result.scalars().all()
        }

    async def save_goal_set(
        self,
        user_id: int,
        period: GoalPeriod,
        period_start: date,
        author: GoalAuthor,
        targets: Mapping[Any, Any],
        current_user_id: int,
        comment: Optional[str] = None,
        commit: bool = True
    ) -> GoalSetRecord:
        """Upsert a goal set; metrics missing from ``targets`` are removed."""
        try:
            goals = GoalSet.from_mapping(targets, period=period, author=author)
            record = await self.get_goal_record(user_id, period, period_start, author)

            if record is None:
                record = GoalSetRecord(
                    user_id=user_id,
                    period=period,
                    period_start=normalize_period_start(period, period_start),
                    author=author,
                    created_by=current_user_id,
                )
                record.targets = []
                self.db.add(record)

            record.comment = comment
            record.updated_by = current_user_id

            # Update rows in place so the (goal_set_id, metric) constraint never sees duplicates
            existing = {target.metric: target for target in record.targets}
            for metric in MetricKey:
                if goals.has(metric):
                    value = float(normalize_number(goals.target(metric)))
                    if metric in existing:
                        existing[metric].target = value
                    else:
                        record.targets.append(GoalTarget(metric=metric, target=value, created_by=current_user_id))
                elif metric in existing:
                    record.targets.remove(existing[metric])

            if commit:
                await self.db.commit()
                log_user_action(current_user_id, "SAVE", f"{period.value}_{author.value}_goals", user_id)
                record = await self.get_goal_record(user_id, period, period_start, author)
            else:
                await self.db.flush()
            return record

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error saving {period.value} goals for user {user_id}: {str(e)}")
            raise
