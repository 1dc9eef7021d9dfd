"""
Teamspace Backend — Offline (DATABASE_DISABLED) Mode Tests
============================================================

What:  With `database_disabled` on, routes serve fixtures and never query a store.
How:   Flips the shared settings object for the duration of each test.

What we test:
    ✅ Login accepts only the configured mock credentials
    ✅ Notes, team, events and conversations come from fixtures
    ✅ Writes still validate their input
    ✅ /health reports mock mode without probing
"""

import pytest
import pytest_asyncio

from teamspace.config import settings
from teamspace.services import mock_data


@pytest.fixture
def mock_mode(monkeypatch):
    monkeypatch.setattr(settings, "database_disabled", True)


@pytest_asyncio.fixture
async def mock_headers(test_client, mock_mode):
    response = await test_client.post(
        "/api/auth/login",
        json={"email": settings.mock_user_email, "password": settings.mock_user_password},
    )
    return {"Authorization": f"Bearer {response.json()['token']}"}


class TestMockAuth:

    @pytest.mark.asyncio
    async def test_login_with_mock_credentials(self, test_client, mock_mode):
        response = await test_client.post(
            "/api/auth/login",
            json={"email": settings.mock_user_email, "password": settings.mock_user_password},
        )

        assert response.status_code == 200
        assert response.json()["user"]["user_id"] == settings.mock_user_id
        assert response.json()["user"]["first_name"] == settings.mock_user_first_name

    @pytest.mark.asyncio
    async def test_login_with_other_credentials(self, test_client, mock_mode):
        response = await test_client.post(
            "/api/auth/login", json={"email": "someone@example.com", "password": "whatever"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_profile_without_token_still_401(self, test_client, mock_mode):
        response = await test_client.get("/api/auth/profile")

        assert response.status_code == 401


class TestMockWorkspace:

    @pytest.mark.asyncio
    async def test_notes_fixtures(self, test_client, mock_headers):
        listing = await test_client.get("/api/notes/my-notes", headers=mock_headers)
        search = await test_client.get("/api/notes", headers=mock_headers, params={"q": "launch"})
        single = await test_client.get(f"/api/notes/{mock_data.DUMMY_NOTE_IDS[0]}", headers=mock_headers)
        missing = await test_client.get("/api/notes/1", headers=mock_headers)

        assert [n["note_id"] for n in listing.json()["notes"]] == mock_data.DUMMY_NOTE_IDS
        assert [n["title"] for n in search.json()["notes"]] == ["Launch checklist"]
        assert single.json()["note"]["title"] == "Quarterly roadmap"
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_create_note_validates(self, test_client, mock_headers):
        created = await test_client.post("/api/notes", headers=mock_headers, json={"content": "hi"})
        rejected = await test_client.post("/api/notes", headers=mock_headers, json={"title": "x"})

        assert created.status_code == 201
        assert created.json()["note"]["title"] == "Untitled"
        assert rejected.status_code == 400

    @pytest.mark.asyncio
    async def test_team_fixture(self, test_client, mock_headers):
        response = await test_client.get("/api/teams/current", headers=mock_headers)

        assert response.json()["team"]["team_id"] == mock_data.DUMMY_TEAM_ID
        assert [m["first_name"] for m in response.json()["members"]] == ["You", "Taylor", "Jordan"]

    @pytest.mark.asyncio
    async def test_create_event_puts_new_event_first(self, test_client, mock_headers):
        response = await test_client.post(
            "/api/events",
            headers=mock_headers,
            json={"title": "Demo", "start_time": "2099-01-01T09:00:00Z", "end_time": "2099-01-01T10:00:00Z"},
        )

        assert response.status_code == 201
        events = response.json()["events"]
        assert events[0]["title"] == "Demo"
        assert len(events) == 4

    @pytest.mark.asyncio
    async def test_create_event_still_validates(self, test_client, mock_headers):
        response = await test_client.post(
            "/api/events", headers=mock_headers, json={"title": "Demo", "start_time": "later"}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_conversations_and_messages(self, test_client, mock_headers):
        inbox = await test_client.get("/api/messaging/conversations", headers=mock_headers)
        thread = await test_client.get("/api/messaging/conversations/1/messages", headers=mock_headers)
        sent = await test_client.post(
            "/api/messaging/conversations/2/messages", headers=mock_headers, json={"content": "ok"}
        )

        assert [c["title"] for c in inbox.json()["conversations"]] == ["Draft review", "1:1 with Jordan"]
        assert len(thread.json()["messages"]) == 3
        assert sent.status_code == 201
        assert sent.json()["messages"][-1]["content"] == "ok"

    @pytest.mark.asyncio
    async def test_health_in_mock_mode(self, test_client, mock_mode):
        response = await test_client.get("/health")

        assert response.json()["mock_mode"] is True
        assert response.json()["database"] == "disabled"
        assert response.json()["status"] == "healthy"
