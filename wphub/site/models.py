"""Site domain models."""

import secrets
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from wphub.core.mixins import CreatedByMixin, TimestampMixin
from wphub.ownership.owner import OwnedMixin


class ConnectionStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    error = "error"


def generate_api_key() -> str:
    return secrets.token_urlsafe(32)


class Site(OwnedMixin, TimestampMixin, CreatedByMixin, SQLModel, table=True):
    __tablename__: str = "sites"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=255)
    url: str = Field(max_length=500)
    api_key: str = Field(default_factory=generate_api_key, max_length=128)
    shared_with_teams: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    connection_status: ConnectionStatus = Field(
        default=ConnectionStatus.inactive, max_length=10
    )
    wp_version: str | None = Field(default=None, max_length=50)
    connection_checked_at: datetime | None = Field(default=None)
