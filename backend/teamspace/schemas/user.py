"""
Teamspace Backend — Account Schemas
=====================================

What:  Request/response models for /api/auth.
Why:   The password hash lives on the ORM model only; `UserResponse` is the
       single place that decides which user fields leave the server.

Request fields are optional at the schema level on purpose: UserService
checks them and raises ValidationError with a message naming the missing
fields, which is what the SPA shows.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """Public view of a user (never includes the password hash)."""
    user_id: int
    first_name: str
    last_name: str
    email: str
    pfp_url: Optional[str] = None
    role: str
    job_title: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegisterRequest(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    pfp_url: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    """
    Partial profile update.

    first_name/last_name are only applied when non-empty; the remaining
    fields are applied whenever they are present in the body, so sending
    `"bio": null` clears the bio.
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    pfp_url: Optional[str] = None
    job_title: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class AuthResponse(BaseModel):
    """Returned by register and login."""
    message: str
    user: UserResponse
    token: str = Field(description="Bearer token for the Authorization header")


class ProfileResponse(BaseModel):
    user: UserResponse


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserResponse
