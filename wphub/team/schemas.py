"""Team domain schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field
from sqlmodel import SQLModel

from wphub.core.schemas import UtcDatetime
from wphub.team.models import InviteStatus, MemberStatus, TeamRole


class TeamMember(BaseModel):
    """One entry of ``Team.members``."""

    user_id: uuid.UUID
    email: str
    team_role_id: TeamRole = TeamRole.member
    status: MemberStatus = MemberStatus.pending
    joined_at: datetime | None = None


class TeamSettings(BaseModel):
    allow_member_invites: bool = False
    default_team_role_id: TeamRole = TeamRole.member


class TeamCreate(SQLModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None


class TeamUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None
    settings: TeamSettings | None = None


class TeamRead(SQLModel):
    id: uuid.UUID
    name: str
    description: str | None
    owner_id: uuid.UUID
    members: list[TeamMember]
    is_blocked: bool
    settings: TeamSettings
    created_by: str | None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TeamWithRole(TeamRead):
    """A team as seen by one user, with that user's resolved role."""

    my_role: str | None = None


class InviteCreate(SQLModel):
    email: EmailStr
    team_role_id: TeamRole | None = None


class InviteRead(SQLModel):
    id: uuid.UUID
    team_id: uuid.UUID
    invited_email: str
    team_role_id: TeamRole
    invited_by: str
    status: InviteStatus
    accepted_at: UtcDatetime | None
    created_at: UtcDatetime
