"""Messaging domain models.

Messages are stored with their recipients already expanded: personal
deliveries list user ids in ``recipient_ids`` and team-inbox deliveries
reference teams through ``team_id`` or ``recipient_ids``.
"""

import uuid
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from wphub.core.mixins import CreatedByMixin, TimestampMixin


class RecipientType(str, Enum):
    user = "user"
    team = "team"
    admin = "admin"
    multiple_users = "multiple_users"
    all_users = "all_users"
    all_team_owners = "all_team_owners"
    multiple_teams = "multiple_teams"
    all_team_inboxes = "all_team_inboxes"


# Delivered to the users listed in recipient_ids.
PERSONAL_RECIPIENT_TYPES = frozenset(
    {
        RecipientType.user,
        RecipientType.multiple_users,
        RecipientType.all_users,
        RecipientType.all_team_owners,
    }
)

# Delivered to team inboxes.
TEAM_RECIPIENT_TYPES = frozenset(
    {
        RecipientType.team,
        RecipientType.multiple_teams,
        RecipientType.all_team_inboxes,
    }
)


class MessagePriority(str, Enum):
    low = "low"
    normal = "normal"
    high = "high"
    urgent = "urgent"


class NotificationType(str, Enum):
    info = "info"
    success = "success"
    warning = "warning"
    error = "error"
    team_invite = "team_invite"


class Message(TimestampMixin, CreatedByMixin, SQLModel, table=True):
    __tablename__: str = "messages"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    sender_id: uuid.UUID = Field(index=True)
    sender_email: str = Field(max_length=255)
    sender_name: str = Field(default="", max_length=120)
    recipient_type: RecipientType = Field(max_length=20, index=True)
    recipient_id: uuid.UUID | None = Field(default=None, index=True)
    recipient_email: str | None = Field(default=None, max_length=255)
    recipient_ids: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    team_id: uuid.UUID | None = Field(default=None, index=True)
    subject: str = Field(max_length=255)
    message: str
    priority: MessagePriority = Field(default=MessagePriority.normal, max_length=10)
    category: str = Field(default="general", max_length=50)
    is_read: bool = Field(default=False, index=True)
    replies: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    context: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))


class Notification(TimestampMixin, SQLModel, table=True):
    __tablename__: str = "notifications"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    recipient_id: uuid.UUID = Field(index=True)
    title: str = Field(max_length=255)
    message: str
    type: NotificationType = Field(default=NotificationType.info, max_length=20)
    team_invite_id: uuid.UUID | None = Field(default=None, index=True)
    is_read: bool = Field(default=False, index=True)
