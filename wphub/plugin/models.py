"""Plugin domain models.

``versions`` is kept in ascending creation order and ``latest_version``
always mirrors its last element (see versions.py). ``installed_on`` records
which managed sites run which version.
"""

import uuid
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from wphub.core.mixins import CreatedByMixin, TimestampMixin
from wphub.ownership.owner import OwnedMixin


class PluginSource(str, Enum):
    upload = "upload"
    wplibrary = "wplibrary"


class Plugin(OwnedMixin, TimestampMixin, CreatedByMixin, SQLModel, table=True):
    __tablename__: str = "plugins"
    __table_args__ = (
        UniqueConstraint("owner_type", "owner_id", "slug", name="uq_plugins_owner_slug"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=255)
    slug: str = Field(index=True, max_length=255)
    description: str | None = Field(default=None)
    author: str | None = Field(default=None, max_length=255)
    author_url: str | None = Field(default=None, max_length=500)
    source: PluginSource = Field(default=PluginSource.upload, max_length=20)
    versions: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    latest_version: str | None = Field(default=None, max_length=50)
    installed_on: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    shared_with_teams: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
