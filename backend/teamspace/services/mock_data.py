"""
Teamspace Backend — Offline Fixtures
======================================

What:  Canned users, notes, team, events and conversations served when
       DATABASE_DISABLED=true.
Who:   Route handlers, which branch here instead of calling a service.
Why:   Lets the SPA run with no PostgreSQL or MongoDB at all.

Every builder returns fresh objects with timestamps relative to "now".
Writes (create note, create event, send message) return what the
persisted result would look like; nothing is stored between requests.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from teamspace.config import settings
from teamspace.models.note import DEFAULT_NOTE_TITLE
from teamspace.models.user import utcnow
from teamspace.schemas.event import EventResponse
from teamspace.schemas.messaging import (
    ConversationSummary,
    LastMessage,
    MessageResponse,
    MessageSender,
    Participant,
)
from teamspace.schemas.note import NoteResponse
from teamspace.schemas.team import TeamMemberResponse, TeamResponse
from teamspace.schemas.user import UserResponse

DUMMY_NOTE_IDS = [900001, 900002, 900003]
DUMMY_TEAM_ID = 700001
DUMMY_EVENT_IDS = [800001, 800002, 800003]

TAYLOR = {"user_id": 200001, "first_name": "Taylor", "last_name": "Morgan", "email": "taylor@example.com"}
JORDAN = {"user_id": 200002, "first_name": "Jordan", "last_name": "Lee", "email": "jordan@example.com"}


def _you(user_id: int) -> Dict:
    return {"user_id": user_id, "first_name": "You", "last_name": "", "email": "you@example.com"}


def _epoch_id() -> int:
    return int(utcnow().timestamp())


# ── Users ─────────────────────────────────────────────────────────────────

def mock_user(**overrides) -> UserResponse:
    """The configured MOCK_USER_* profile, optionally with fields replaced."""
    profile = {
        "user_id": settings.mock_user_id,
        "first_name": settings.mock_user_first_name,
        "last_name": settings.mock_user_last_name,
        "email": settings.mock_user_email,
        "pfp_url": settings.mock_user_pfp_url,
        "role": settings.mock_user_role,
        "job_title": settings.mock_user_job_title,
        "location": settings.mock_user_location,
        "bio": settings.mock_user_bio,
    }
    profile.update({k: v for k, v in overrides.items() if k in profile})
    return UserResponse(**profile)


def mock_credentials_match(email: Optional[str], password: Optional[str]) -> bool:
    return email == settings.mock_user_email and password == settings.mock_user_password


# ── Notes ─────────────────────────────────────────────────────────────────

_NOTE_TITLES = ["Quarterly roadmap", "Launch checklist", "Retro notes"]
_NOTE_BODIES = [
    "Draft outlining major milestones for the upcoming quarter.",
    "Checklist covering final verification steps before launch.",
    "Action items captured during last Friday's retrospective.",
]


def _build_notes(user_id: int) -> List[NoteResponse]:
    now = utcnow()
    return [
        NoteResponse(
            note_id=note_id,
            noter_id=user_id,
            title=_NOTE_TITLES[index],
            content=_NOTE_BODIES[index],
            created_at=now - timedelta(days=index + 3),
            updated_at=now - timedelta(hours=index + 1),
            termination_marked=False,
            first_name=TAYLOR["first_name"],
            last_name=TAYLOR["last_name"],
            email=TAYLOR["email"],
        )
        for index, note_id in enumerate(DUMMY_NOTE_IDS)
    ]


def get_dummy_notes(user_id: int, limit: int, offset: int) -> List[NoteResponse]:
    return _build_notes(user_id)[offset:offset + limit]


def search_dummy_notes(user_id: int, query: str) -> List[NoteResponse]:
    needle = query.lower()
    return [
        note for note in _build_notes(user_id)
        if needle in note.title.lower() or needle in note.content.lower()
    ]


def get_dummy_note(user_id: int, note_id: int) -> Optional[NoteResponse]:
    return next((n for n in _build_notes(user_id) if n.note_id == note_id), None)


def create_dummy_note(user_id: int, title: Optional[str], content: str) -> NoteResponse:
    timestamp = utcnow()
    return NoteResponse(
        note_id=_epoch_id(),
        noter_id=user_id,
        title=title or DEFAULT_NOTE_TITLE,
        content=content,
        created_at=timestamp,
        updated_at=timestamp,
        termination_marked=False,
        first_name=TAYLOR["first_name"],
        last_name=TAYLOR["last_name"],
        email=TAYLOR["email"],
    )


def update_dummy_note(
    note: NoteResponse,
    title: Optional[str],
    content: Optional[str],
) -> NoteResponse:
    return note.model_copy(
        update={
            "title": title if title is not None else note.title,
            "content": content if content is not None else note.content,
            "updated_at": utcnow(),
        }
    )


# ── Team ──────────────────────────────────────────────────────────────────

def get_dummy_team(user_id: int) -> TeamResponse:
    return TeamResponse(
        team_id=DUMMY_TEAM_ID,
        name="Workspace Demo Team",
        description="Auto-generated while the database is disabled",
        created_by=user_id,
        created_at=utcnow(),
    )


def get_dummy_team_members(user_id: int) -> List[TeamMemberResponse]:
    now = utcnow()
    roster = [
        (_you(user_id), "admin", 7, "Team Lead"),
        (TAYLOR, "member", 5, "Product Manager"),
        (JORDAN, "member", 3, "Designer"),
    ]
    return [
        TeamMemberResponse(
            team_member_id=index + 1,
            team_id=DUMMY_TEAM_ID,
            role=role,
            joined_at=now - timedelta(days=days_ago),
            job_title=job_title,
            pfp_url=None,
            **person,
        )
        for index, (person, role, days_ago, job_title) in enumerate(roster)
    ]


# ── Events ────────────────────────────────────────────────────────────────

def get_dummy_events(team_id: int, user_id: int) -> List[EventResponse]:
    now = utcnow()

    def event(index: int, title: str, description: str, start_h: int,
              created_h: int, assignee: Optional[Dict]) -> EventResponse:
        return EventResponse(
            event_id=DUMMY_EVENT_IDS[index],
            team_id=team_id,
            title=title,
            description=description,
            start_time=now + timedelta(hours=start_h),
            end_time=now + timedelta(hours=start_h + 1),
            assigned_to_user_id=user_id if assignee else None,
            created_by=user_id,
            created_at=now - timedelta(hours=created_h),
            assigned_first_name=assignee["first_name"] if assignee else None,
            assigned_last_name=assignee["last_name"] if assignee else None,
        )

    return [
        event(0, "Weekly standup", "Quick sync to cover blockers", 1, 4, TAYLOR),
        event(1, "Design review", "Walk through new onboarding flow", 4, 6, None),
        event(2, "Retro planning", "Prepare agenda for Friday", 24, 12, JORDAN),
    ]


def create_dummy_event(
    team_id: int,
    user_id: int,
    title: str,
    description: Optional[str],
    start: datetime,
    end: datetime,
    assigned_to_user_id: Optional[int],
) -> List[EventResponse]:
    """The new event first, then the base fixtures."""
    new_event = EventResponse(
        event_id=_epoch_id(),
        team_id=team_id,
        title=title,
        description=description,
        start_time=start,
        end_time=end,
        assigned_to_user_id=assigned_to_user_id,
        created_by=user_id,
        created_at=utcnow(),
        assigned_first_name=TAYLOR["first_name"] if assigned_to_user_id else None,
        assigned_last_name=TAYLOR["last_name"] if assigned_to_user_id else None,
    )
    return [new_event] + get_dummy_events(team_id, user_id)


# ── Messaging ─────────────────────────────────────────────────────────────

def _participant(person: Dict, job_title: str) -> Participant:
    return Participant(pfp_url=None, job_title=job_title, **person)


def _sender(person: Dict) -> MessageSender:
    return MessageSender(pfp_url=None, **person)


def _message(message_id: int, conversation_id: int, person: Dict, content: str,
             minutes_ago: int, is_read: bool) -> MessageResponse:
    return MessageResponse(
        message_id=message_id,
        conversation_id=conversation_id,
        sender_id=person["user_id"],
        content=content,
        created_at=utcnow() - timedelta(minutes=minutes_ago),
        first_name=person["first_name"],
        last_name=person["last_name"],
        email=person["email"],
        pfp_url=None,
        is_read=is_read,
    )


def get_dummy_conversations(user_id: int) -> List[ConversationSummary]:
    now = utcnow()
    you = _participant(_you(user_id), "Team Member")
    taylor = _participant(TAYLOR, "Product Manager")
    jordan = _participant(JORDAN, "Designer")
    return [
        ConversationSummary(
            conversation_id=1,
            title="Draft review",
            is_direct=False,
            created_at=now - timedelta(hours=2),
            unread_count=1,
            last_message=LastMessage(
                message_id=101,
                content="Pushed the latest copy edits, take a look when you can!",
                created_at=now - timedelta(minutes=5),
                sender=_sender(TAYLOR),
            ),
            participants=[you, taylor, jordan],
        ),
        ConversationSummary(
            conversation_id=2,
            title="1:1 with Jordan",
            is_direct=True,
            created_at=now - timedelta(hours=4),
            unread_count=0,
            last_message=LastMessage(
                message_id=102,
                content="Sounds good, let's sync after standup tomorrow.",
                created_at=now - timedelta(minutes=45),
                sender=_sender(JORDAN),
            ),
            participants=[you, jordan],
        ),
    ]


def get_dummy_messages(user_id: int, conversation_id: int) -> List[MessageResponse]:
    you = _you(user_id)
    threads = {
        1: [
            _message(90, 1, TAYLOR, "Morning! Here's the updated project outline.", 60, True),
            _message(91, 1, you, "Looks great, I'll add the metrics section shortly.", 50, False),
            _message(101, 1, TAYLOR, "Pushed the latest copy edits, take a look when you can!", 5, False),
        ],
        2: [
            _message(102, 2, JORDAN, "Sounds good, let's sync after standup tomorrow.", 45, True),
            _message(103, 2, you, "Perfect, I'll bring the latest dashboard mockups.", 30, False),
        ],
    }
    return threads.get(conversation_id, [])


def append_dummy_message(user_id: int, conversation_id: int, content: str) -> List[MessageResponse]:
    """The thread with the caller's own messages shown unread, plus the new one."""
    thread = [
        m.model_copy(update={"is_read": False}) if m.sender_id == user_id else m
        for m in get_dummy_messages(user_id, conversation_id)
    ]
    you = _you(user_id)
    thread.append(
        MessageResponse(
            message_id=_epoch_id(),
            conversation_id=conversation_id,
            sender_id=user_id,
            content=content,
            created_at=utcnow(),
            first_name=you["first_name"],
            last_name=you["last_name"],
            email=you["email"],
            pfp_url=None,
            is_read=False,
        )
    )
    return thread
