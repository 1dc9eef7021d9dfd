"""
Teamspace Backend — Request Identity Dependency
=================================================

What:  `get_current_user`: verifies the bearer token and yields the caller.
Who:   Injected into every route except register, login and health.

Flow:
    1. No `Authorization: Bearer <token>` header → 401
    2. Token fails signature/expiry check        → 403
    3. Mock mode: trust the token's claims (no store to check against)
    4. Otherwise the user must still exist        → 401 if deleted
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.config import settings
from teamspace.database import get_db_session
from teamspace.exceptions import AuthenticationError
from teamspace.models.user import User
from teamspace.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """Identity attached to an authenticated request."""
    user_id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Access token required")

    payload = decode_access_token(credentials.credentials)

    if settings.database_disabled:
        return CurrentUser(
            user_id=payload.get("user_id") or settings.mock_user_id,
            email=payload.get("email") or settings.mock_user_email,
            role="admin" if payload.get("role") == "admin" else settings.mock_user_role,
        )

    user_id = payload.get("user_id")
    user = await db.get(User, user_id) if isinstance(user_id, int) else None
    if user is None:
        raise AuthenticationError(message="User not found")

    return CurrentUser(user_id=user.user_id, email=user.email, role=user.role)
