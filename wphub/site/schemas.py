"""Site domain schemas."""

import uuid

from pydantic import BaseModel, Field, HttpUrl
from sqlmodel import SQLModel

from wphub.core.schemas import UtcDatetime
from wphub.ownership.owner import OwnerType
from wphub.site.models import ConnectionStatus


class SiteCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    url: HttpUrl
    team_id: uuid.UUID | None = None


class SiteUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    url: HttpUrl | None = None
    shared_with_teams: list[uuid.UUID] | None = None


class SiteRead(SQLModel):
    id: uuid.UUID
    name: str
    url: str
    owner_type: OwnerType
    owner_id: uuid.UUID
    shared_with_teams: list[str]
    connection_status: ConnectionStatus
    wp_version: str | None
    connection_checked_at: UtcDatetime | None
    created_by: str | None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class SiteWithKey(SiteRead):
    """Returned only to users who can manage the site."""

    api_key: str


class SyncFailure(BaseModel):
    site_id: uuid.UUID
    error: str


class SyncReport(BaseModel):
    sites_synced: int = 0
    plugins_updated: int = 0
    failures: list[SyncFailure] = []
