"""
Teamspace Backend — Messaging Route Handlers
==============================================

What:  /api/messaging: conversation inbox, message listing and sending,
       explicit mark-read.
Who:   The SPA's Messaging page.

Read state:
    Fetching a conversation's messages marks it read for the caller after the
    list is built, so the returned `is_read` flags show the state before
    this visit.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.config import settings
from teamspace.database import get_db_session
from teamspace.dependencies import CurrentUser, get_current_user
from teamspace.exceptions import ValidationError
from teamspace.schemas.common import ErrorResponse, MessageResponse
from teamspace.schemas.messaging import (
    ConversationListResponse,
    MessageListResponse,
    MessageSentResponse,
    SendMessageRequest,
)
from teamspace.services import mock_data
from teamspace.services.messaging_service import messaging_service
from teamspace.services.team_service import team_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messaging", tags=["Messaging"])

ConversationId = Annotated[int, Path(gt=0, description="Conversation identifier")]

_FORBIDDEN = {403: {"description": "Not a member", "model": ErrorResponse}}


@router.get(
    "/conversations",
    response_model=ConversationListResponse,
    responses={404: {"description": "Team not found", "model": ErrorResponse}},
    summary="Conversations the caller belongs to, newest first",
)
async def list_conversations(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ConversationListResponse:
    if settings.database_disabled:
        return ConversationListResponse(
            conversations=mock_data.get_dummy_conversations(current_user.user_id)
        )

    team = await team_service.ensure_team_with_samples(db, current_user.user_id)
    await messaging_service.ensure_default_conversation(db, team.team_id, current_user.user_id)
    summaries = await messaging_service.get_summaries_for_user(db, current_user.user_id)
    return ConversationListResponse(conversations=summaries)


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=MessageListResponse,
    responses=_FORBIDDEN,
    summary="Messages in a conversation, oldest first",
)
async def list_messages(
    conversation_id: ConversationId,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageListResponse:
    if settings.database_disabled:
        return MessageListResponse(
            messages=mock_data.get_dummy_messages(current_user.user_id, conversation_id)
        )

    messages = await messaging_service.list_messages(db, conversation_id, current_user.user_id)
    await messaging_service.mark_read(db, conversation_id, current_user.user_id)
    return MessageListResponse(messages=messages)


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageSentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Blank content", "model": ErrorResponse}, **_FORBIDDEN},
    summary="Send a message",
)
async def send_message(
    conversation_id: ConversationId,
    payload: SendMessageRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageSentResponse:
    if settings.database_disabled:
        content = (payload.content or "").strip()
        if not content:
            raise ValidationError(message="Message content is required", field="content")
        return MessageSentResponse(
            message="Message sent",
            messages=mock_data.append_dummy_message(current_user.user_id, conversation_id, content),
        )

    messages = await messaging_service.send_message(
        db, conversation_id, current_user.user_id, payload.content
    )
    return MessageSentResponse(message="Message sent", messages=messages)


@router.post(
    "/conversations/{conversation_id}/read",
    response_model=MessageResponse,
    responses=_FORBIDDEN,
    summary="Mark a conversation read",
)
async def mark_conversation_read(
    conversation_id: ConversationId,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    if not settings.database_disabled:
        await messaging_service.require_member(db, conversation_id, current_user.user_id)
        await messaging_service.mark_read(db, conversation_id, current_user.user_id)
    return MessageResponse(message="Conversation marked as read")
