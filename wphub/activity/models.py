"""Activity domain models.

Append-only audit trail written alongside mutations.
"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import text
from sqlmodel import Field, SQLModel

from wphub.core.mixins import utc_now


class EntityType(str, Enum):
    user = "user"
    team = "team"
    site = "site"
    plugin = "plugin"
    project = "project"
    message = "message"
    connector = "connector"


class ActivityLog(SQLModel, table=True):
    __tablename__: str = "activity_logs"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_email: str = Field(index=True, max_length=255)
    action: str = Field(max_length=500)
    entity_type: EntityType = Field(max_length=20, index=True)
    entity_id: str | None = Field(default=None, max_length=64, index=True)
    details: str | None = Field(default=None)
    created_at: datetime = Field(
        default_factory=utc_now,
        index=True,
        sa_column_kwargs={"server_default": text("CURRENT_TIMESTAMP")},
    )
