"""
Teamspace Backend — Event Service (Team Calendar)
===================================================

What:  Lists and creates calendar events for a team and seeds sample events
       into an empty calendar.
Who:   Called by /api/events routes after TeamService has bootstrapped the team.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from teamspace.exceptions import ValidationError
from teamspace.models.event import Event
from teamspace.models.user import User, utcnow
from teamspace.schemas.event import CreateEventRequest, EventResponse

logger = logging.getLogger(__name__)

# (title, description, hours from now, duration in minutes)
SAMPLE_EVENTS = [
    ("Team Standup", "Daily sync with the team", 1, 30),
    ("Design Review", "Review current design proposals", 4, 60),
    ("Project Planning", "Plan next sprint goals", 8, 90),
]


def parse_event_time(value: str) -> Optional[datetime]:
    """
    ISO-8601 string → aware datetime; None when unparsable.

    A trailing "Z" is accepted and naive values are taken as UTC.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_event_window(payload: CreateEventRequest) -> Tuple[datetime, datetime]:
    """
    Returns (start, end).

    Raises:
        ValidationError (→ 400):
            - title, start_time or end_time missing
            - a time that is not ISO-8601
            - end not after start
    """
    if not payload.title or not payload.start_time or not payload.end_time:
        raise ValidationError(message="Title, start_time and end_time are required")

    start = parse_event_time(payload.start_time)
    end = parse_event_time(payload.end_time)
    if start is None or end is None:
        raise ValidationError(message="Invalid start or end time")
    if end <= start:
        raise ValidationError(message="End time must be after start time", field="end_time")
    return start, end


class EventService:

    async def list_for_team(self, db: AsyncSession, team_id: int) -> List[EventResponse]:
        """Team events by start time, with the assignee's name when there is one."""
        assignee = aliased(User)
        result = await db.execute(
            select(Event, assignee.first_name, assignee.last_name)
            .outerjoin(assignee, assignee.user_id == Event.assigned_to_user_id)
            .where(Event.team_id == team_id)
            .order_by(Event.start_time.asc(), Event.event_id.asc())
        )
        return [
            EventResponse(
                event_id=event.event_id,
                team_id=event.team_id,
                title=event.title,
                description=event.description,
                start_time=event.start_time,
                end_time=event.end_time,
                assigned_to_user_id=event.assigned_to_user_id,
                created_by=event.created_by,
                created_at=event.created_at,
                assigned_first_name=first_name,
                assigned_last_name=last_name,
            )
            for event, first_name, last_name in result.all()
        ]

    async def create_event(
        self,
        db: AsyncSession,
        team_id: int,
        user_id: int,
        payload: CreateEventRequest,
    ) -> Event:
        """
        Raises:
            ValidationError: as for validate_event_window, or an
                assigned_to_user_id naming no user (→ 400)
        """
        start, end = validate_event_window(payload)

        if payload.assigned_to_user_id is not None:
            if await db.get(User, payload.assigned_to_user_id) is None:
                raise ValidationError(
                    message="Assigned user does not exist",
                    field="assigned_to_user_id",
                )

        event = Event(
            team_id=team_id,
            title=payload.title,
            description=payload.description,
            start_time=start,
            end_time=end,
            assigned_to_user_id=payload.assigned_to_user_id,
            created_by=user_id,
        )
        db.add(event)
        await db.flush()

        logger.info("Event %s created in team %s by user %s", event.event_id, team_id, user_id)
        return event

    async def ensure_sample_events(self, db: AsyncSession, team_id: int, user_id: int) -> None:
        """Seeds three events relative to now when the team calendar is empty."""
        result = await db.execute(
            select(func.count()).select_from(Event).where(Event.team_id == team_id)
        )
        if result.scalar_one() > 0:
            return

        now = utcnow()
        for title, description, hours_ahead, minutes in SAMPLE_EVENTS:
            start = now + timedelta(hours=hours_ahead)
            db.add(
                Event(
                    team_id=team_id,
                    title=title,
                    description=description,
                    start_time=start,
                    end_time=start + timedelta(minutes=minutes),
                    assigned_to_user_id=user_id,
                    created_by=user_id,
                )
            )
        await db.flush()
        logger.info("Seeded sample events into team %s", team_id)


# ── Singleton Instance ────────────────────────────────────────────────────
event_service = EventService()
