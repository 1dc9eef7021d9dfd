"""
Teamspace Backend — Account API Tests
=======================================

What:  /api/auth end-to-end through the ASGI app on in-memory SQLite.

What we test:
    ✅ Register validates fields, email format, password length, duplicates
    ✅ Login returns a working token; bad credentials → 401
    ✅ Missing token → 401, bad token → 403, token for a deleted user → 401
    ✅ Deleting an account removes its notes, memberships, messages and events
    ✅ Profile partial update (names only when non-empty, nullable fields cleared)
    ✅ Password change checks the current password
    ✅ Error bodies carry error code, message and request_id
"""

import pytest
from sqlalchemy import func, select

from teamspace.models import ConversationMember, Event, Message, Note, TeamMember

REGISTER_BODY = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "password": "secret123",
}


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_user_and_token(self, test_client):
        response = await test_client.post("/api/auth/register", json=REGISTER_BODY)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User registered successfully"
        assert body["user"]["email"] == "ada@example.com"
        assert body["user"]["role"] == "user"
        assert "password" not in body["user"]
        assert body["token"]

    @pytest.mark.asyncio
    async def test_missing_fields(self, test_client):
        response = await test_client.post("/api/auth/register", json={"email": "ada@example.com"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Missing required fields: first_name, last_name, email, password"
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_invalid_email(self, test_client):
        response = await test_client.post(
            "/api/auth/register", json={**REGISTER_BODY, "email": "not-an-email"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid email format"
        assert response.json()["details"] == {"field": "email"}

    @pytest.mark.asyncio
    async def test_short_password(self, test_client):
        response = await test_client.post(
            "/api/auth/register", json={**REGISTER_BODY, "password": "12345"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Password must be at least 6 characters long"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, test_client):
        await test_client.post("/api/auth/register", json=REGISTER_BODY)
        response = await test_client.post("/api/auth/register", json=REGISTER_BODY)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"
        assert response.json()["message"] == "User with this email already exists"

    @pytest.mark.asyncio
    async def test_non_object_body(self, test_client):
        response = await test_client.post("/api/auth/register", json=["not", "an", "object"])

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_and_use_token(self, test_client, make_user):
        await make_user()

        login = await test_client.post(
            "/api/auth/login", json={"email": "ada.lovelace@example.com", "password": "secret123"}
        )
        assert login.status_code == 200
        assert login.json()["message"] == "Login successful"

        token = login.json()["token"]
        profile = await test_client.get(
            "/api/auth/profile", headers={"Authorization": f"Bearer {token}"}
        )
        assert profile.status_code == 200
        assert profile.json()["user"]["first_name"] == "Ada"

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client, make_user):
        await make_user()

        response = await test_client.post(
            "/api/auth/login", json={"email": "ada.lovelace@example.com", "password": "nope123"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_unknown_email_looks_the_same(self, test_client):
        response = await test_client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_missing_credentials(self, test_client):
        response = await test_client.post("/api/auth/login", json={"email": "ada@example.com"})

        assert response.status_code == 400
        assert response.json()["message"] == "Email and password are required"


class TestTokenChecks:

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, test_client):
        response = await test_client.get("/api/auth/profile")

        assert response.status_code == 401
        assert response.json()["message"] == "Access token required"

    @pytest.mark.asyncio
    async def test_bad_token_is_403(self, test_client):
        response = await test_client.get(
            "/api/auth/profile", headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 403
        assert response.json()["error"] == "permission_denied"

    @pytest.mark.asyncio
    async def test_deleted_user_token_is_401(self, test_client, make_user, auth_headers):
        ada = await make_user()
        headers = auth_headers(ada)

        deleted = await test_client.delete("/api/auth/profile", headers=headers)
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Account deleted successfully"

        response = await test_client.get("/api/auth/profile", headers=headers)
        assert response.status_code == 401
        assert response.json()["message"] == "User not found"


async def _owned_row_counts(session_factory, user_id):
    owned_by = {
        "notes": (Note, Note.noter_id),
        "team_members": (TeamMember, TeamMember.user_id),
        "conversation_members": (ConversationMember, ConversationMember.user_id),
        "messages": (Message, Message.sender_id),
        "events": (Event, Event.created_by),
    }
    counts = {}
    async with session_factory() as session:
        for table, (model, column) in owned_by.items():
            result = await session.execute(
                select(func.count()).select_from(model).where(column == user_id)
            )
            counts[table] = result.scalar_one()
    return counts


class TestAccountDeletion:

    @pytest.mark.asyncio
    async def test_delete_removes_owned_rows(
        self, test_client, make_user, auth_headers, session_factory
    ):
        ada = await make_user()
        headers = auth_headers(ada)
        await test_client.post("/api/notes", headers=headers, json={"title": "Draft", "content": "x"})
        inbox = await test_client.get("/api/messaging/conversations", headers=headers)
        conversation_id = inbox.json()["conversations"][0]["conversation_id"]
        await test_client.post(
            f"/api/messaging/conversations/{conversation_id}/messages",
            headers=headers,
            json={"content": "bye"},
        )
        await test_client.get("/api/events", headers=headers)

        before = await _owned_row_counts(session_factory, ada.user_id)
        assert all(count > 0 for count in before.values()), before

        deleted = await test_client.delete("/api/auth/profile", headers=headers)
        assert deleted.status_code == 200

        after = await _owned_row_counts(session_factory, ada.user_id)
        assert after == dict.fromkeys(before, 0)


class TestProfile:

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client, make_user, auth_headers):
        ada = await make_user()
        headers = auth_headers(ada)
        await test_client.put("/api/auth/profile", headers=headers, json={"bio": "Analyst"})

        response = await test_client.put(
            "/api/auth/profile",
            headers=headers,
            json={"first_name": "", "job_title": "Mathematician", "bio": None},
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert response.json()["message"] == "Profile updated successfully"
        assert user["first_name"] == "Ada"
        assert user["job_title"] == "Mathematician"
        assert user["bio"] is None

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, test_client, make_user, auth_headers):
        ada = await make_user()

        response = await test_client.put("/api/auth/profile", headers=auth_headers(ada), json={})

        assert response.status_code == 400
        assert response.json()["message"] == "No profile fields to update"


class TestPasswordChange:

    @pytest.mark.asyncio
    async def test_change_then_login_with_new_password(self, test_client, make_user, auth_headers):
        ada = await make_user()

        response = await test_client.put(
            "/api/auth/password",
            headers=auth_headers(ada),
            json={"current_password": "secret123", "new_password": "newsecret"},
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Password updated successfully"

        login = await test_client.post(
            "/api/auth/login", json={"email": ada.email, "password": "newsecret"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, test_client, make_user, auth_headers):
        ada = await make_user()

        response = await test_client.put(
            "/api/auth/password",
            headers=auth_headers(ada),
            json={"current_password": "wrong1", "new_password": "newsecret"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Current password is incorrect"

    @pytest.mark.asyncio
    async def test_missing_fields(self, test_client, make_user, auth_headers):
        ada = await make_user()

        response = await test_client.put(
            "/api/auth/password", headers=auth_headers(ada), json={"new_password": "newsecret"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Current password and new password are required"
