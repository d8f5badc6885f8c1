"""User domain models.

SQLModel table definition for User.
"""

import uuid
from enum import Enum

from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from wphub.core.mixins import CreatedByMixin, TimestampMixin


class UserRole(str, Enum):
    user = "user"
    admin = "admin"


class UserStatus(str, Enum):
    """User account status.

    - active: may sign in and use the hub
    - inactive: blocked by a platform admin
    """

    active = "active"
    inactive = "inactive"


class User(TimestampMixin, CreatedByMixin, SQLModel, table=True):
    """User database model.

    Note: external_id is internal-only (Firebase UID) and should
    never be exposed in API responses.
    """

    __tablename__: str = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    external_id: str = Field(index=True, unique=True)
    email: EmailStr = Field(index=True, unique=True, max_length=255)
    full_name: str = Field(default="", max_length=120)
    role: UserRole = Field(default=UserRole.user, max_length=10)
    status: UserStatus = Field(default=UserStatus.active, max_length=20)
    company: str | None = Field(default=None, max_length=120)
    phone: str | None = Field(default=None, max_length=40)
    two_fa_enabled: bool = Field(default=False)
    two_fa_verified_session: bool = Field(default=False)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.active
