from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import get_current_user
from salestrack.core.database import get_async_session
from salestrack.models.auth.user import User
from salestrack.schemas.tracking.weekday_question_schema import DailyQuestions
from salestrack.services.tracking.weekday_question_service import WeekdayQuestionService

router = APIRouter()

@router.get("", response_model=DailyQuestions)
async def get_daily_questions(
    weekday: Optional[int] = Query(None, ge=1, le=7),
    trainee: bool = Query(False),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Questions for the daily entry form (default: today's weekday)"""
    service = WeekdayQuestionService(session)
    return await service.get_daily_questions(weekday, trainee)
