"""Team domain models.

``Team.members`` is a JSON list of member records (see schemas.TeamMember).
A member entry with status ``pending`` doubles as the placeholder for an
outstanding invite.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from wphub.core.mixins import CreatedByMixin, TimestampMixin


class TeamRole(str, Enum):
    owner = "Owner"
    admin = "Admin"
    manager = "Manager"
    member = "Member"


class MemberStatus(str, Enum):
    pending = "pending"
    active = "active"


class InviteStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


def default_team_settings() -> dict[str, Any]:
    return {
        "allow_member_invites": False,
        "default_team_role_id": TeamRole.member.value,
    }


class Team(TimestampMixin, CreatedByMixin, SQLModel, table=True):
    __tablename__: str = "teams"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=120)
    description: str | None = Field(default=None)
    owner_id: uuid.UUID = Field(index=True)
    members: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    is_blocked: bool = Field(default=False)
    settings: dict[str, Any] = Field(
        default_factory=default_team_settings, sa_column=Column(JSON, nullable=False)
    )


class TeamInvite(TimestampMixin, CreatedByMixin, SQLModel, table=True):
    __tablename__: str = "team_invites"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    team_id: uuid.UUID = Field(index=True)
    invited_email: str = Field(index=True, max_length=255)
    team_role_id: TeamRole = Field(default=TeamRole.member, max_length=20)
    invited_by: str = Field(max_length=255)
    status: InviteStatus = Field(default=InviteStatus.pending, max_length=20)
    accepted_at: datetime | None = Field(default=None)
