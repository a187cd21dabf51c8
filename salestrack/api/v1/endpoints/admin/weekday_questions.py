from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import require_role
from salestrack.core.database import get_async_session
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import UserRole
from salestrack.schemas.tracking.weekday_question_schema import WeekdayQuestionResponse, WeekdayQuestionSave
from salestrack.services.tracking.weekday_question_service import WeekdayQuestionService

router = APIRouter()

@router.get("", response_model=List[WeekdayQuestionResponse])
async def get_weekday_questions(
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    """Stored question sets ordered by weekday; weekdays without one use the built-in set"""
    service = WeekdayQuestionService(session)
    return await service.get_questions()

@router.put("/{weekday}", response_model=WeekdayQuestionResponse)
async def save_weekday_question(
    weekday: int,
    payload: WeekdayQuestionSave,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    service = WeekdayQuestionService(session)
    return await service.save_question(weekday, payload, current_user.id)

@router.delete("/{weekday}")
async def delete_weekday_question(
    weekday: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.ADMIN))
):
    """Drop the stored set so the built-in questions apply again"""
    service = WeekdayQuestionService(session)
    await service.delete_question(weekday, current_user.id)
    return {"message": f"Questions for weekday {weekday} deleted successfully"}
