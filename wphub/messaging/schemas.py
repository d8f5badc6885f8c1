"""Messaging domain schemas."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Self

from pydantic import BaseModel, Field, model_validator
from sqlmodel import SQLModel

from wphub.core.schemas import UtcDatetime
from wphub.messaging.models import MessagePriority, NotificationType, RecipientType


class LogicalRecipient(str, Enum):
    """What a sender picks; expanded into stored fields when the message is sent."""

    admin = "admin"
    user = "user"
    multiple_users = "multiple_users"
    all_users = "all_users"
    team = "team"
    multiple_teams = "multiple_teams"
    all_team_inboxes = "all_team_inboxes"
    all_team_owners = "all_team_owners"
    teammates = "teammates"


class TeammateMode(str, Enum):
    individual = "individual"
    all = "all"
    team_inbox = "team_inbox"
    owner = "owner"
    selection = "selection"


class MessageCategory(str, Enum):
    general = "general"
    support = "support"
    bug = "bug"
    feature_request = "feature_request"


class MessageContext(BaseModel):
    """The site, plugin, team or user a message is about."""

    type: str
    id: str | None = None
    name: str | None = None


class MessageCreate(SQLModel):
    recipient_type: LogicalRecipient = LogicalRecipient.admin
    recipient_id: uuid.UUID | None = None
    recipient_ids: list[uuid.UUID] = []
    team_id: uuid.UUID | None = None
    teammate_mode: TeammateMode = TeammateMode.individual
    subject: str = Field(default="", max_length=255)
    message: str = Field(min_length=1)
    priority: MessagePriority = MessagePriority.normal
    category: MessageCategory = MessageCategory.general
    context: MessageContext | None = None


class Reply(BaseModel):
    sender_id: uuid.UUID
    sender_email: str
    message: str
    created_at: datetime


class ReplyCreate(SQLModel):
    message: str = Field(min_length=1)


class ReplyRead(Reply):
    created_at: UtcDatetime


class MessageRead(SQLModel):
    id: uuid.UUID
    sender_id: uuid.UUID
    sender_email: str
    sender_name: str
    recipient_type: RecipientType
    recipient_id: uuid.UUID | None
    recipient_email: str | None
    recipient_ids: list[str]
    team_id: uuid.UUID | None
    subject: str
    message: str
    priority: MessagePriority
    category: str
    is_read: bool
    replies: list[ReplyRead]
    context: MessageContext | None
    created_at: UtcDatetime


class UnreadCount(BaseModel):
    count: int
    poll_interval_seconds: int


class NotificationCreate(SQLModel):
    """Admin notification to one user or to every active member of a team."""

    recipient_id: uuid.UUID | None = None
    team_id: uuid.UUID | None = None
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    type: NotificationType = NotificationType.info

    @model_validator(mode="after")
    def _one_target(self) -> Self:
        if (self.recipient_id is None) == (self.team_id is None):
            raise ValueError("Provide exactly one of recipient_id or team_id")
        if self.type == NotificationType.team_invite:
            raise ValueError("team_invite notifications are created by invites")
        return self


class NotificationRead(SQLModel):
    id: uuid.UUID
    recipient_id: uuid.UUID
    title: str
    message: str
    type: NotificationType
    team_invite_id: uuid.UUID | None
    is_read: bool
    created_at: UtcDatetime
