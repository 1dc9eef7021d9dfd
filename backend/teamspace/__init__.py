"""
Teamspace Backend — Application Package Initializer
====================================================

What: Marks the `teamspace` directory as a Python package.
Why:  Enables module imports like `from teamspace.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend keeps the same layering for every resource (users, notes,
    teams, events, conversations):

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependency
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Queries, bootstrap, summaries
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database / Mongo (Persistence)    │  ← Async sessions, Motor client
    └─────────────────────────────────────┘

    When mock/offline mode is on, services for each resource are bypassed and
    routes serve fixtures from `services.mock_data` instead.
"""

__version__ = "1.0.0"
