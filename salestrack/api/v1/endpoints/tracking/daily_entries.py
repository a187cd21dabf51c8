from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import get_current_user
from salestrack.core.database import get_async_session
from salestrack.models.auth.user import User
from salestrack.schemas.tracking.daily_entry_schema import DailyEntryCreate, DailyEntryResponse
from salestrack.services.tracking.daily_entry_service import DailyEntryService

router = APIRouter()

@router.post("", response_model=DailyEntryResponse)
async def save_daily_entry(
    entry: DailyEntryCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Create or overwrite the current user's entry for the given day"""
    service = DailyEntryService(session)
    return await service.upsert_entry(current_user.id, entry)

@router.get("", response_model=List[DailyEntryResponse])
async def get_daily_entries(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Own entries, newest first (default: last 7 days)"""
    service = DailyEntryService(session)
    return await service.get_entries(current_user.id, start_date, end_date)
