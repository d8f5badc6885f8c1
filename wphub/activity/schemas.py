"""Activity domain schemas."""

import uuid

from sqlmodel import SQLModel

from wphub.activity.models import EntityType
from wphub.core.schemas import UtcDatetime


class ActivityRead(SQLModel):
    id: uuid.UUID
    user_email: str
    action: str
    entity_type: EntityType
    entity_id: str | None
    details: str | None
    created_at: UtcDatetime
