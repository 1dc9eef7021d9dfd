"""
Teamspace Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: AsyncMock session for pure unit tests
    ├── db_engine:       in-memory SQLite (aiosqlite) with every table created
    ├── db_session:      a session on db_engine for service-level tests
    ├── test_client:     HTTPX AsyncClient whose requests use db_engine
    ├── make_user:       inserts a user and returns it
    └── auth_headers:    builds an Authorization header for a user
"""

import os
import tempfile

# Override settings for testing BEFORE any teamspace import
os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{tempfile.mkdtemp(prefix='teamspace_test_')}/teamspace.db"
)
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["MONGO_ENABLED"] = "false"
os.environ["DATABASE_DISABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from teamspace import models  # noqa: F401
from teamspace.database import Base, get_db_session
from teamspace.models.user import User
from teamspace.security import create_access_token
from teamspace.services.user_service import user_service


# ══════════════════════════════════════════════════════════════════════════
# Mock Session
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for tests that never reach SQL.

    Usage:
        mock_db_session.execute.return_value.scalars.return_value.all.return_value = []
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Real SQL on in-memory SQLite
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    One in-memory database per test.

    StaticPool keeps a single connection so every session sees the same
    database; foreign keys are switched on so cascades behave as in PostgreSQL.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the app, with `get_db_session` pointed at the
    test database (same commit/rollback behaviour as the real dependency).

    ASGITransport does not run the lifespan, so no startup bootstrap happens.
    """
    from teamspace.main import app

    async def _override_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture
def make_user(session_factory):
    """
    Inserts and commits a user.

    Usage:
        ada = await make_user("Ada", "Lovelace")
    """
    async def _make_user(
        first_name: str = "Ada",
        last_name: str = "Lovelace",
        email: str = None,
        password: str = "secret123",
        role: str = "user",
    ) -> User:
        async with session_factory() as session:
            user = await user_service.create_user(
                session,
                first_name=first_name,
                last_name=last_name,
                email=email or f"{first_name.lower()}.{last_name.lower()}@example.com",
                password=password,
                role=role,
            )
            await session.commit()
            return user

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> Dict[str, str]:
        token = create_access_token(user.user_id, user.email, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
