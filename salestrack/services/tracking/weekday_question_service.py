import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.exceptions import NotFoundError, ValidationError
from salestrack.core.logging import log_user_action
from salestrack.models.tracking.weekday_question import WeekdayQuestion
from salestrack.schemas.tracking.weekday_question_schema import WeekdayQuestionSave

logger = logging.getLogger(__name__)

YESTERDAY_QUESTION = "What are your three diamonds from the Saturday training?"

# ISO weekday -> prompts for today, used until an admin stores its own set
DEFAULT_TODAY_QUESTIONS: Dict[int, List[str]] = {
    1: ["Which consultations should be discussed this week?"],
    2: [
        "Which follow-ups are due?",
        "Which follow-ups do you need help with?",
        "Which contest do you want to win?",
    ],
    3: [
        "Who do you register for the TIV?",
        "Who do you register for the TAA?",
        "Who from your network is still missing?",
        "Who may your leader invite for you today?",
    ],
    4: ["Are all appointments for next week booked?"],
    5: ["Which company do you want to contact about bAV?"],
}

# Weekends have no dedicated set
FALLBACK_TODAY_QUESTIONS = [
    "What do you need help with today?",
    "What do you want to train today?",
    "What do you want to do even better today?",
]


def check_weekday(weekday: int) -> int:
    if weekday not in range(1, 8):
        raise ValidationError(f"Weekday must be between 1 (Monday) and 7 (Sunday), got {weekday}")
    return weekday


class WeekdayQuestionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(self, weekday: int, include_deleted: bool = False) -> Optional[WeekdayQuestion]:
        conditions = [WeekdayQuestion.weekday == weekday]
        if not include_deleted:
            conditions.append(WeekdayQuestion.is_deleted == False)
        result = await self.db.execute(select(WeekdayQuestion).where(*conditions))
        return result.scalars().first()

    async def get_questions(self) -> List[WeekdayQuestion]:
        result = await self.db.execute(
            select(WeekdayQuestion)
            .where(WeekdayQuestion.is_deleted == False)
            .order_by(WeekdayQuestion.weekday)
        )
        return list(result.scalars().all())

    async def get_daily_questions(
        self,
        weekday: Optional[int] = None,
        trainee: bool = False,
        today: Optional[date] = None
    ) -> Dict[str, Any]:
        """Prompts for the daily entry form; trainees get the trainee question about yesterday."""
        weekday = check_weekday(weekday or (today or date.today()).isoweekday())
        row = await self._get_row(weekday)
        if row is None:
            return {
                "weekday": weekday,
                "yesterday_question": YESTERDAY_QUESTION,
                "today_questions": DEFAULT_TODAY_QUESTIONS.get(weekday, FALLBACK_TODAY_QUESTIONS),
                "is_default": True,
            }

        yesterday = row.yesterday_question
        if trainee and row.trainee_question:
            yesterday = row.trainee_question
        return {
            "weekday": weekday,
            "yesterday_question": yesterday,
            "today_questions": list(row.today_questions or []),
            "is_default": False,
        }

    async def save_question(self, weekday: int, payload: WeekdayQuestionSave, current_user_id: int) -> WeekdayQuestion:
        """Upsert the question set of one weekday (a deleted set is revived)."""
        check_weekday(weekday)
        try:
            row = await self._get_row(weekday, include_deleted=True)
            if row is None:
                row = WeekdayQuestion(weekday=weekday, created_by=current_user_id)
                self.db.add(row)
            row.yesterday_question = payload.yesterday_question
            row.today_questions = payload.today_questions
            row.trainee_question = payload.trainee_question
            row.is_deleted = False
            row.updated_by = current_user_id

            await self.db.commit()
            await self.db.refresh(row)
            log_user_action(current_user_id, "SAVE", "weekday_question", weekday)
            return row

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error saving questions for weekday {weekday}: {str(e)}")
            raise

    async def delete_question(self, weekday: int, current_user_id: int) -> bool:
        row = await self._get_row(check_weekday(weekday))
        if not row:
            raise NotFoundError(f"No stored questions for weekday {weekday}")

        try:
            row.is_deleted = True
            row.updated_by = current_user_id
            await self.db.commit()
            log_user_action(current_user_id, "DELETE", "weekday_question", weekday)
            return True
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error deleting questions for weekday {weekday}: {str(e)}")
            raise
