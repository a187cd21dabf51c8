import logging
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.exceptions import NotFoundError
from salestrack.core.logging import log_user_action
from salestrack.engine.types import ThresholdConfig
from salestrack.models.goals.goal_set import GoalSetRecord
from salestrack.models.goals.weekly_goal_review import WeeklyGoalReview
from salestrack.models.shared.enums import GoalAuthor, GoalPeriod
from salestrack.schemas.goals.goal_schema import WeeklyReviewSave
from salestrack.services.dashboard.progress_service import ProgressService
from salestrack.services.goals.goal_service import GoalService, record_to_goal_set
from salestrack.utils.periods import week_range

logger = logging.getLogger(__name__)


class WeeklyReviewService:
    """Closing review of a user's own weekly goals: achieved flag, notes and next week's focus."""

    def __init__(self, db: AsyncSession, config: Optional[ThresholdConfig] = None):
        self.db = db
        self.config = config or ThresholdConfig()
        self.goals = GoalService(db)

    async def _get_goal_record_or_404(self, user_id: int, week_start: date) -> GoalSetRecord:
        record = await self.goals.get_goal_record(user_id, GoalPeriod.WEEKLY, week_start, GoalAuthor.SELF)
        if record is None:
            raise NotFoundError(f"No weekly goals for the week starting {week_start.isoformat()}")
        return record

    async def _get_review(self, goal_set_id: int) -> Optional[WeeklyGoalReview]:
        result = await self.db.execute(
            select(WeeklyGoalReview).where(
                WeeklyGoalReview.goal_set_id == goal_set_id,
                WeeklyGoalReview.is_deleted == False
            )
        )
        return result.scalars().first()

    async def get_review(self, user_id: int, week_start: date) -> Dict[str, Any]:
        week = week_range(week_start)
        record = await self._get_goal_record_or_404(user_id, week.start)
        review = await self._get_review(record.id)
        progress = await ProgressService(self.db, self.config).get_user_progress(user_id, GoalPeriod.WEEKLY, week.start)

        with_target = [item for item in progress["progress"] if item["target"] > 0]
        return {
            "user_id": user_id,
            "week_start": week.start,
            "week_end": week.end,
            "targets": record_to_goal_set(record, GoalPeriod.WEEKLY, GoalAuthor.SELF).as_dict(),
            "totals": progress["totals"],
            "progress": progress["progress"],
            "targets_met": bool(with_target) and all(item["percentage"] >= 100 for item in with_target),
            "is_reviewed": review is not None,
            "goal_achieved": review.goal_achieved if review else None,
            "completion_notes": review.completion_notes if review else None,
            "next_week_focus": review.next_week_focus if review else None,
        }

    async def save_review(self, user_id: int, payload: WeeklyReviewSave) -> Dict[str, Any]:
        """Reviewing the same week again overwrites the previous review."""
        week_start = week_range(payload.week_start).start
        record = await self._get_goal_record_or_404(user_id, week_start)
        goal_set_id = record.id

        try:
            review = await self._get_review(goal_set_id)
            if review is None:
                review = WeeklyGoalReview(
                    goal_set_id=goal_set_id, user_id=user_id, week_start=week_start, created_by=user_id
                )
                self.db.add(review)
            review.goal_achieved = payload.goal_achieved
            review.completion_notes = payload.completion_notes
            review.next_week_focus = payload.next_week_focus
            review.updated_by = user_id

            await self.db.commit()
            log_user_action(user_id, "REVIEW", "weekly_goals", week_start.isoformat())

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error saving weekly review {week_start} for user {user_id}: {str(e)}")
            raise

        return await self.get_review(user_id, week_start)
