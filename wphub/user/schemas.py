"""User domain schemas.

Request and response schemas for user operations.

Security notes:
- external_id (Firebase UID) is internal-only, never exposed in responses
- UserUpdateMe is restricted to prevent privilege escalation
"""

import uuid

from pydantic import EmailStr, Field
from sqlmodel import SQLModel

from wphub.core.schemas import UtcDatetime
from wphub.user.models import UserRole, UserStatus


class UserPublicRead(SQLModel):
    """Response schema for the signed-in user's own profile."""

    id: uuid.UUID
    email: EmailStr
    full_name: str
    company: str | None
    phone: str | None
    role: UserRole
    status: UserStatus
    two_fa_enabled: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime


class UserRead(UserPublicRead):
    """Admin view of a user."""

    two_fa_verified_session: bool
    created_by: str | None


class UserSummary(SQLModel):
    """Minimal user reference used in team and message payloads."""

    id: uuid.UUID
    email: EmailStr
    full_name: str


class UserUpdateMe(SQLModel):
    """Self-service profile fields.

    Users cannot modify: email, role, status, external_id.
    """

    full_name: str | None = Field(default=None, max_length=120)
    company: str | None = Field(default=None, max_length=120)
    phone: str | None = Field(default=None, max_length=40)


class UserUpdate(SQLModel):
    """Fields a platform admin may change on any user."""

    email: EmailStr | None = None
    full_name: str | None = Field(default=None, max_length=120)
    company: str | None = Field(default=None, max_length=120)
    phone: str | None = Field(default=None, max_length=40)
    role: UserRole | None = None
    status: UserStatus | None = None
    two_fa_enabled: bool | None = None
