"""
Teamspace Backend — Team Bootstrap and Calendar Tests
=======================================================

What we test:
    ✅ First visit creates "<First Last>'s Team" with the caller as admin
    ✅ Sample teammates are added once and reused across teams
    ✅ A sample email inserted by another bootstrap is re-read, not a 500
    ✅ Bootstrap is idempotent
    ✅ Missing user → no team / NotFoundError
    ✅ Event time parsing and window validation
    ✅ Sample events are seeded only into an empty calendar
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from teamspace.exceptions import NotFoundError, ValidationError
from teamspace.models.team import Team
from teamspace.models.user import User
from teamspace.schemas.event import CreateEventRequest
from teamspace.services.event_service import EventService, parse_event_time, validate_event_window
from teamspace.services.team_service import (
    FALLBACK_TEAM_NAME,
    SAMPLE_MEMBERS,
    TeamService,
    default_team_name,
)
from teamspace.services.user_service import user_service


async def _create_user(db, first_name="Ada", last_name="Lovelace"):
    return await user_service.create_user(
        db,
        first_name=first_name,
        last_name=last_name,
        email=f"{first_name.lower()}@example.com",
        password="secret123",
    )


async def _count(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestTeamBootstrap:

    def setup_method(self):
        self.service = TeamService()

    def test_default_team_name(self):
        assert default_team_name(User(first_name="Ada", last_name="Lovelace")) == "Ada Lovelace's Team"
        assert default_team_name(User(first_name="", last_name="")) == FALLBACK_TEAM_NAME

    @pytest.mark.asyncio
    async def test_first_visit_builds_team_with_samples(self, db_session):
        ada = await _create_user(db_session)

        current = await self.service.get_current_team(db_session, ada.user_id)

        assert current.team.name == "Ada Lovelace's Team"
        assert current.team.description == "Auto-generated team"
        assert current.team.created_by == ada.user_id
        assert [m.first_name for m in current.members] == ["Ada", "Bob", "Carol", "David"]
        assert current.members[0].role == "admin"
        assert {m.role for m in current.members[1:]} == {"member"}

    @pytest.mark.asyncio
    async def test_bootstrap_is_idempotent(self, db_session):
        ada = await _create_user(db_session)

        first = await self.service.ensure_team_with_samples(db_session, ada.user_id)
        second = await self.service.ensure_team_with_samples(db_session, ada.user_id)

        assert first.team_id == second.team_id
        assert await _count(db_session, Team) == 1
        assert await self.service.count_members(db_session, first.team_id) == 4

    @pytest.mark.asyncio
    async def test_sample_users_are_shared_between_teams(self, db_session):
        """A second owner's team reuses the existing sample accounts."""
        ada = await _create_user(db_session)
        grace = await _create_user(db_session, "Grace", "Hopper")

        await self.service.ensure_team_with_samples(db_session, ada.user_id)
        await self.service.ensure_team_with_samples(db_session, grace.user_id)

        assert await _count(db_session, Team) == 2
        assert await _count(db_session, User) == 5

    @pytest.mark.asyncio
    async def test_sample_email_taken_concurrently_is_reused(self, db_session):
        """
        Another user's bootstrap commits Bob between our lookup and our insert:
        the unique-email collision rolls back to the savepoint and the
        committed row is reused.
        """
        bob_sample = SAMPLE_MEMBERS[0]
        existing = await user_service.create_user(db_session, password="x", **bob_sample)
        existing_id = existing.user_id
        real_find = user_service.find_by_email
        lookups = []

        async def find_missing_once(db, email):
            lookups.append(email)
            if len(lookups) == 1:
                return None
            return await real_find(db, email)

        with patch.object(user_service, "find_by_email", new=find_missing_once):
            member = await self.service.get_or_create_sample_user(db_session, bob_sample)

        assert member.user_id == existing_id
        assert lookups == [bob_sample["email"], bob_sample["email"]]
        assert await _count(db_session, User) == 1

        # The session is still usable after the rolled-back savepoint
        ada = await _create_user(db_session)
        await self.service.ensure_team_with_samples(db_session, ada.user_id)
        assert await _count(db_session, User) == 4

    @pytest.mark.asyncio
    async def test_collision_without_committed_row_propagates(self, mock_db_session):
        savepoint = MagicMock()
        savepoint.__aenter__ = AsyncMock()
        savepoint.__aexit__ = AsyncMock(return_value=False)
        mock_db_session.begin_nested = MagicMock(return_value=savepoint)
        collision = IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed"))

        with patch("teamspace.services.team_service.user_service") as users:
            users.find_by_email = AsyncMock(return_value=None)
            users.create_user = AsyncMock(side_effect=collision)

            with pytest.raises(IntegrityError):
                await self.service.get_or_create_sample_user(mock_db_session, SAMPLE_MEMBERS[1])

        assert users.find_by_email.await_count == 2
        savepoint.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_user_has_no_team(self, db_session):
        assert await self.service.ensure_default_team(db_session, 4242) is None

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.ensure_team_with_samples(db_session, 4242)
        assert exc_info.value.message == "Team not found"


class TestEventValidation:

    def test_parse_accepts_zulu_and_naive(self):
        assert parse_event_time("2026-05-01T10:00:00Z") == datetime(2026, 5, 1, 10, tzinfo=timezone.utc)
        assert parse_event_time("2026-05-01T10:00:00") == datetime(2026, 5, 1, 10, tzinfo=timezone.utc)
        assert parse_event_time("next tuesday") is None

    def test_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_event_window(CreateEventRequest(title="Sync", start_time="2026-05-01T10:00:00Z"))
        assert exc_info.value.message == "Title, start_time and end_time are required"

    def test_unparsable_time(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_event_window(
                CreateEventRequest(title="Sync", start_time="soon", end_time="2026-05-01T11:00:00Z")
            )
        assert exc_info.value.message == "Invalid start or end time"

    def test_end_must_follow_start(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_event_window(
                CreateEventRequest(
                    title="Sync",
                    start_time="2026-05-01T10:00:00Z",
                    end_time="2026-05-01T10:00:00Z",
                )
            )
        assert exc_info.value.message == "End time must be after start time"


class TestEventService:

    def setup_method(self):
        self.service = EventService()
        self.teams = TeamService()

    @pytest.mark.asyncio
    async def test_sample_events_seeded_once(self, db_session):
        ada = await _create_user(db_session)
        team = await self.teams.ensure_default_team(db_session, ada.user_id)

        await self.service.ensure_sample_events(db_session, team.team_id, ada.user_id)
        await self.service.ensure_sample_events(db_session, team.team_id, ada.user_id)

        events = await self.service.list_for_team(db_session, team.team_id)
        assert [e.title for e in events] == ["Team Standup", "Design Review", "Project Planning"]
        assert all(e.assigned_first_name == "Ada" for e in events)

    @pytest.mark.asyncio
    async def test_create_event_sorted_by_start(self, db_session):
        ada = await _create_user(db_session)
        team = await self.teams.ensure_default_team(db_session, ada.user_id)

        await self.service.create_event(
            db_session, team.team_id, ada.user_id,
            CreateEventRequest(title="Later", start_time="2030-01-02T09:00:00Z",
                               end_time="2030-01-02T10:00:00Z"),
        )
        await self.service.create_event(
            db_session, team.team_id, ada.user_id,
            CreateEventRequest(title="Sooner", start_time="2030-01-01T09:00:00Z",
                               end_time="2030-01-01T10:00:00Z"),
        )

        events = await self.service.list_for_team(db_session, team.team_id)
        assert [e.title for e in events] == ["Sooner", "Later"]
        assert events[0].assigned_to_user_id is None
        assert events[0].assigned_first_name is None

    @pytest.mark.asyncio
    async def test_unknown_assignee_rejected(self, db_session):
        ada = await _create_user(db_session)
        team = await self.teams.ensure_default_team(db_session, ada.user_id)

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_event(
                db_session, team.team_id, ada.user_id,
                CreateEventRequest(title="Sync", start_time="2030-01-01T09:00:00Z",
                                   end_time="2030-01-01T10:00:00Z", assigned_to_user_id=4242),
            )
        assert exc_info.value.message == "Assigned user does not exist"
