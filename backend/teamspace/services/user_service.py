"""
Teamspace Backend — User Service (Accounts and Profiles)
==========================================================

What:  Registration, login, profile read/update, password change and account
       deletion.
Why:   Keeps credential checks and profile rules out of the route handlers.
Who:   Called by /api/auth routes; `create_user` / `find_by_email` are also
       used by TeamService when it seeds sample teammates.

Validation rules (messages are shown verbatim by the SPA):
    - register: first_name, last_name, email, password all required
    - email must look like local@domain.tld
    - password at least 6 characters
    - duplicate email → 409
"""

import logging
import re
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from teamspace.models.user import User, utcnow
from teamspace.schemas.common import MessageResponse
from teamspace.schemas.user import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    ProfileResponse,
    ProfileUpdateResponse,
    RegisterRequest,
    UpdateProfileRequest,
    UserResponse,
)
from teamspace.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

# Always applied when present in the request body, even as null
OPTIONAL_PROFILE_FIELDS = ("pfp_url", "job_title", "location", "bio")


def _check_password_length(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            field="password",
        )


class UserService:
    """
    Account operations.

    Every method takes the request's session and flushes rather than commits;
    `get_db_session` commits once the route returns.
    """

    async def find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create_user(
        self,
        db: AsyncSession,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        role: str = "user",
        pfp_url: Optional[str] = None,
        job_title: Optional[str] = None,
        location: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> User:
        """Hashes the password and inserts the row; no validation."""
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=hash_password(password),
            role=role,
            pfp_url=pfp_url,
            job_title=job_title,
            location=location,
            bio=bio,
        )
        db.add(user)
        await db.flush()
        return user

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> AuthResponse:
        """
        Create an account and sign the caller in.

        Raises:
            ValidationError: missing field, malformed email, short password (→ 400)
            ConflictError: email already registered (→ 409)
        """
        if not (payload.first_name and payload.last_name and payload.email and payload.password):
            raise ValidationError(
                message="Missing required fields: first_name, last_name, email, password"
            )
        if not EMAIL_PATTERN.match(payload.email):
            raise ValidationError(message="Invalid email format", field="email")
        _check_password_length(payload.password)

        if await self.find_by_email(db, payload.email) is not None:
            raise ConflictError(message="User with this email already exists")

        try:
            user = await self.create_user(
                db,
                first_name=payload.first_name,
                last_name=payload.last_name,
                email=payload.email,
                password=payload.password,
                pfp_url=payload.pfp_url,
            )
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise ConflictError(message="User with this email already exists")

        logger.info("Registered user %s", user.user_id)
        return AuthResponse(
            message="User registered successfully",
            user=UserResponse.model_validate(user),
            token=create_access_token(user.user_id, user.email, user.role),
        )

    async def login(self, db: AsyncSession, payload: LoginRequest) -> AuthResponse:
        """
        Raises:
            ValidationError: email or password missing (→ 400)
            AuthenticationError: unknown email or wrong password (→ 401)
        """
        if not payload.email or not payload.password:
            raise ValidationError(message="Email and password are required")

        user = await self.find_by_email(db, payload.email)
        # Same message for both cases so the response does not reveal which emails exist
        if user is None or not verify_password(payload.password, user.password):
            raise AuthenticationError(message="Invalid email or password")

        logger.info("User %s logged in", user.user_id)
        return AuthResponse(
            message="Login successful",
            user=UserResponse.model_validate(user),
            token=create_access_token(user.user_id, user.email, user.role),
        )

    async def _get_user(self, db: AsyncSession, user_id: int) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", message="User not found")
        return user

    async def get_profile(self, db: AsyncSession, user_id: int) -> ProfileResponse:
        user = await self._get_user(db, user_id)
        return ProfileResponse(user=UserResponse.model_validate(user))

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: int,
        payload: UpdateProfileRequest,
    ) -> ProfileUpdateResponse:
        """
        Partial update.

        first_name/last_name are applied only when non-empty. pfp_url, job_title,
        location and bio are applied whenever the key is present in the body.

        Raises:
            ValidationError: nothing to update (→ 400)
            NotFoundError: user vanished (→ 404)
        """
        supplied = payload.model_dump(exclude_unset=True)
        updates = {
            name: supplied[name]
            for name in ("first_name", "last_name")
            if supplied.get(name)
        }
        updates.update(
            {name: supplied[name] for name in OPTIONAL_PROFILE_FIELDS if name in supplied}
        )
        if not updates:
            raise ValidationError(message="No profile fields to update")

        user = await self._get_user(db, user_id)
        for name, value in updates.items():
            setattr(user, name, value)
        user.updated_at = utcnow()
        await db.flush()

        logger.info("Updated profile for user %s (%s)", user_id, ", ".join(sorted(updates)))
        return ProfileUpdateResponse(
            message="Profile updated successfully",
            user=UserResponse.model_validate(user),
        )

    async def change_password(
        self,
        db: AsyncSession,
        user_id: int,
        payload: ChangePasswordRequest,
    ) -> MessageResponse:
        """
        Raises:
            ValidationError: missing field or short new password (→ 400)
            AuthenticationError: current password wrong (→ 401)
        """
        if not payload.current_password or not payload.new_password:
            raise ValidationError(message="Current password and new password are required")
        _check_password_length(payload.new_password)

        user = await self._get_user(db, user_id)
        if not verify_password(payload.current_password, user.password):
            raise AuthenticationError(message="Current password is incorrect")

        user.password = hash_password(payload.new_password)
        user.updated_at = utcnow()
        await db.flush()

        logger.info("Password changed for user %s", user_id)
        return MessageResponse(message="Password updated successfully")

    async def delete_user(self, db: AsyncSession, user_id: int) -> MessageResponse:
        """
        Remove the account. Notes, memberships, sent messages and created
        events go with it through the foreign-key cascades.
        """
        try:
            result = await db.execute(delete(User).where(User.user_id == user_id))
        except SQLAlchemyError as e:
            logger.error("Failed to delete user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the account. Please try again.",
                context={"user_id": user_id},
            )

        if result.rowcount == 0:
            raise NotFoundError(resource="user", message="User not found")

        logger.info("Deleted user %s", user_id)
        return MessageResponse(message="Account deleted successfully")


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
