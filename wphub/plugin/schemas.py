"""Plugin domain schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field
from sqlmodel import SQLModel

from wphub.core.schemas import UtcDatetime
from wphub.ownership.owner import OwnerType
from wphub.plugin.models import PluginSource


class PluginVersion(BaseModel):
    """One entry of ``Plugin.versions``."""

    version: str
    download_url: str = ""
    created_at: datetime | None = None


class InstalledOn(BaseModel):
    """One entry of ``Plugin.installed_on``."""

    site_id: uuid.UUID
    version: str | None = None
    is_active: bool = False
    installed_at: datetime | None = None


class PluginHeader(BaseModel):
    """Metadata read from the main file of a plugin archive."""

    name: str
    slug: str
    version: str | None = None
    description: str | None = None
    author: str | None = None
    author_url: str | None = None


class PluginUpload(SQLModel):
    """A ZIP that has already been stored; ``file_url`` is where to fetch it."""

    file_url: str = Field(min_length=1)
    team_id: uuid.UUID | None = None


class WordPressPluginAdd(SQLModel):
    slug: str = Field(min_length=1, max_length=255)
    team_id: uuid.UUID | None = None


class VersionCreate(SQLModel):
    version: str = Field(min_length=1, max_length=50)
    download_url: str = Field(min_length=1)


class InstallRequest(SQLModel):
    site_ids: list[uuid.UUID] = Field(min_length=1)
    version: str | None = None


class SiteInstallResult(BaseModel):
    site_id: uuid.UUID
    success: bool
    error: str | None = None


class InstallReport(BaseModel):
    plugin_id: uuid.UUID
    version: str
    results: list[SiteInstallResult]

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)


class PluginRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str | None
    author: str | None
    author_url: str | None
    owner_type: OwnerType
    owner_id: uuid.UUID
    source: PluginSource
    versions: list[PluginVersion]
    latest_version: str | None
    installed_on: list[InstalledOn]
    shared_with_teams: list[str]
    created_by: str | None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class WordPressPlugin(BaseModel):
    """A plugin from the wordpress.org plugin directory."""

    name: str
    slug: str
    version: str | None = None
    author: str | None = None
    author_profile: str | None = None
    short_description: str | None = None
    description: str | None = None
    rating: float | None = None
    active_installs: int | None = None
    download_url: str | None = None


class WordPressSearchResult(BaseModel):
    page: int
    pages: int
    results: int
    plugins: list[WordPressPlugin]
