from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.api.dependencies import get_threshold_config, require_role
from salestrack.core.database import get_async_session
from salestrack.engine.types import ThresholdConfig
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import UserRole
from salestrack.schemas.common.pagination import ApiResponse
from salestrack.schemas.leadership.conversation_schema import (
    ConversationCreate, ConversationResponse, WeeklyConversationResponse
)
from salestrack.services.leadership.leadership_service import LeadershipService

router = APIRouter()

@router.get("/{partner_id}/weekly-conversation", response_model=ApiResponse[WeeklyConversationResponse])
async def get_weekly_conversation(
    partner_id: int,
    as_of: Optional[date] = Query(None, description="Any day of the week to review"),
    session: AsyncSession = Depends(get_async_session),
    config: ThresholdConfig = Depends(get_threshold_config),
    current_user: User = Depends(require_role(UserRole.LEADER, UserRole.ADMIN))
):
    """Conversation aid for the weekly 1:1 with a direct partner"""
    service = LeadershipService(session, config)
    return {"success": True, "data": await service.get_weekly_conversation(current_user, partner_id, as_of)}

@router.post("/{partner_id}/weekly-conversation", response_model=ApiResponse[ConversationResponse])
async def save_weekly_conversation(
    partner_id: int,
    conversation: ConversationCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.LEADER, UserRole.ADMIN))
):
    """Store the notes of a held conversation"""
    service = LeadershipService(session)
    saved = await service.save_conversation(current_user, partner_id, conversation)
    return {"success": True, "message": "Conversation saved", "data": saved}

@router.get("/{partner_id}/conversations", response_model=ApiResponse[List[ConversationResponse]])
async def get_conversations(
    partner_id: int,
    limit: int = Query(10, ge=1, le=100),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_role(UserRole.LEADER, UserRole.ADMIN))
):
    service = LeadershipService(session)
    return {"success": True, "data": await service.get_conversations(current_user, partner_id, limit)}
