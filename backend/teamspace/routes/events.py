"""
Teamspace Backend — Events Route Handlers
===========================================

What:  /api/events: list and create events on the caller's team calendar.
How:   Both routes bootstrap the team first; listing also seeds sample events
       into an empty calendar. Creating returns the refreshed list.
Who:   The SPA's Calendar page.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.config import settings
from teamspace.database import get_db_session
from teamspace.dependencies import CurrentUser, get_current_user
from teamspace.schemas.common import ErrorResponse
from teamspace.schemas.event import CreateEventRequest, EventCreatedResponse, EventListResponse
from teamspace.services import mock_data
from teamspace.services.event_service import event_service, validate_event_window
from teamspace.services.team_service import team_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["Events"])


@router.get(
    "",
    response_model=EventListResponse,
    responses={404: {"description": "Team not found", "model": ErrorResponse}},
    summary="Team events ordered by start time",
)
async def list_events(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> EventListResponse:
    if settings.database_disabled:
        return EventListResponse(
            events=mock_data.get_dummy_events(mock_data.DUMMY_TEAM_ID, current_user.user_id)
        )

    team = await team_service.ensure_team_with_samples(db, current_user.user_id)
    await event_service.ensure_sample_events(db, team.team_id, current_user.user_id)
    return EventListResponse(events=await event_service.list_for_team(db, team.team_id))


@router.post(
    "",
    response_model=EventCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing or invalid times", "model": ErrorResponse},
        404: {"description": "Team not found", "model": ErrorResponse},
    },
    summary="Create an event on the team calendar",
)
async def create_event(
    payload: CreateEventRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> EventCreatedResponse:
    if settings.database_disabled:
        start, end = validate_event_window(payload)
        events = mock_data.create_dummy_event(
            mock_data.DUMMY_TEAM_ID,
            current_user.user_id,
            payload.title,
            payload.description,
            start,
            end,
            payload.assigned_to_user_id,
        )
        return EventCreatedResponse(message="Event created", events=events)

    team = await team_service.ensure_team_with_samples(db, current_user.user_id)
    await event_service.create_event(db, team.team_id, current_user.user_id, payload)
    events = await event_service.list_for_team(db, team.team_id)
    return EventCreatedResponse(message="Event created", events=events)
