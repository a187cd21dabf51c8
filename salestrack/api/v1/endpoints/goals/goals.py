from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import get_current_user, get_threshold_config
from salestrack.core.database import get_async_session
from salestrack.core.exceptions import PermissionDeniedError
from salestrack.engine.types import ThresholdConfig
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import GoalAuthor, GoalPeriod
from salestrack.schemas.goals.goal_schema import GoalSetResponse, GoalSetSave, WeeklyReviewResponse, WeeklyReviewSave
from salestrack.services.auth.user_service import UserService, can_view_user
from salestrack.services.goals.goal_service import GoalService, ensure_can_author, record_to_goal_set
from salestrack.services.goals.weekly_review_service import WeeklyReviewService
from salestrack.utils.periods import normalize_period_start

router = APIRouter()

@router.put("", response_model=GoalSetResponse)
async def save_goal_set(
    goal_set: GoalSetSave,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Upsert a goal set (self goals by the user, FK goals by the direct leader)"""
    target = await UserService(session).get_user_or_404(goal_set.user_id or current_user.id)
    ensure_can_author(current_user, target, goal_set.author)

    service = GoalService(session)
    record = await service.save_goal_set(
        target.id, goal_set.period, goal_set.period_start, goal_set.author,
        goal_set.targets, current_user.id, comment=goal_set.comment,
    )
    return {
        "user_id": target.id,
        "period": record.period,
        "period_start": record.period_start,
        "author": record.author,
        "targets": record_to_goal_set(record, record.period, record.author).as_dict(),
        "comment": record.comment,
    }

@router.get("", response_model=GoalSetResponse)
async def get_goal_set(
    period: GoalPeriod = Query(...),
    period_start: date = Query(...),
    author: GoalAuthor = Query(GoalAuthor.SELF),
    user_id: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """A stored goal set; missing sets come back with zero targets"""
    target = await UserService(session).get_user_or_404(user_id or current_user.id)
    if not can_view_user(current_user, target):
        raise PermissionDeniedError("Not allowed to view this user's goals")

    service = GoalService(session)
    record = await service.get_goal_record(target.id, period, period_start, author)
    return {
        "user_id": target.id,
        "period": period,
        "period_start": normalize_period_start(period, period_start),
        "author": author,
        "targets": record_to_goal_set(record, period, author).as_dict(),
        "comment": record.comment if record else None,
    }

@router.post("/weekly/review", response_model=WeeklyReviewResponse)
async def review_weekly_goals(
    review: WeeklyReviewSave,
    session: AsyncSession = Depends(get_async_session),
    config: ThresholdConfig = Depends(get_threshold_config),
    current_user: User = Depends(get_current_user)
):
    """Close the week: was the goal reached, what happened and what comes next"""
    service = WeeklyReviewService(session, config)
    return await service.save_review(current_user.id, review)

@router.get("/weekly/review", response_model=WeeklyReviewResponse)
async def get_weekly_review(
    week_start: date = Query(...),
    user_id: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    config: ThresholdConfig = Depends(get_threshold_config),
    current_user: User = Depends(get_current_user)
):
    """Weekly goals next to the week's actuals and the stored review, if any"""
    target = await UserService(session).get_user_or_404(user_id or current_user.id)
    if not can_view_user(current_user, target):
        raise PermissionDeniedError("Not allowed to view this user's goals")
    service = WeeklyReviewService(session, config)
    return await service.get_review(target.id, week_start)
