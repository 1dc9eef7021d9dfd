"""
Teamspace Backend — Auth Route Handlers
=========================================

What:  /api/auth: register, login, profile read/update, password change,
       account deletion.
Who:   Login/Signup and Profile pages of the SPA.

Mock mode:
    Login accepts only the MOCK_USER_EMAIL / MOCK_USER_PASSWORD pair and
    returns a token for the mock user; register, profile and account routes
    echo the mock profile without touching a store.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.config import settings
from teamspace.database import get_db_session
from teamspace.dependencies import CurrentUser, get_current_user
from teamspace.exceptions import AuthenticationError, ValidationError
from teamspace.schemas.common import ErrorResponse, MessageResponse
from teamspace.schemas.user import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    ProfileResponse,
    ProfileUpdateResponse,
    RegisterRequest,
    UpdateProfileRequest,
)
from teamspace.security import create_access_token
from teamspace.services import mock_data
from teamspace.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _mock_auth_response(message: str, **overrides) -> AuthResponse:
    user = mock_data.mock_user(**overrides)
    return AuthResponse(
        message=message,
        user=user,
        token=create_access_token(user.user_id, user.email, user.role),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing field, bad email, short password", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    if settings.database_disabled:
        if not (payload.first_name and payload.last_name and payload.email and payload.password):
            raise ValidationError(
                message="Missing required fields: first_name, last_name, email, password"
            )
        return _mock_auth_response(
            "User registered successfully (mock)",
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
        )

    return await user_service.register(db, payload)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"description": "Email or password missing", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange credentials for a bearer token",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    if settings.database_disabled:
        if not payload.email or not payload.password:
            raise ValidationError(message="Email and password are required")
        if not mock_data.mock_credentials_match(payload.email, payload.password):
            raise AuthenticationError(message="Invalid email or password")
        return _mock_auth_response("Login successful")

    return await user_service.login(db, payload)


@router.get("/profile", response_model=ProfileResponse, summary="Current user's profile")
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    if settings.database_disabled:
        return ProfileResponse(user=mock_data.mock_user())
    return await user_service.get_profile(db, current_user.user_id)


@router.put("/profile", response_model=ProfileUpdateResponse, summary="Update profile fields")
async def update_profile(
    payload: UpdateProfileRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileUpdateResponse:
    if settings.database_disabled:
        updates = payload.model_dump(exclude_unset=True)
        return ProfileUpdateResponse(
            message="Profile updated successfully (mock)",
            user=mock_data.mock_user(**{k: v for k, v in updates.items() if v is not None}),
        )
    return await user_service.update_profile(db, current_user.user_id, payload)


@router.put("/password", response_model=MessageResponse, summary="Change password")
async def change_password(
    payload: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    if settings.database_disabled:
        return MessageResponse(message="Password updated successfully (mock)")
    return await user_service.change_password(db, current_user.user_id, payload)


@router.delete("/profile", response_model=MessageResponse, summary="Delete the account")
async def delete_account(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    if settings.database_disabled:
        return MessageResponse(message="Account deleted (mock)")
    return await user_service.delete_user(db, current_user.user_id)
