"""Ownership domain schemas."""

import uuid
from enum import Enum
from typing import Self

from pydantic import BaseModel, model_validator
from sqlmodel import SQLModel

from wphub.ownership.owner import Owner, OwnerType, make_owner


class OwnedEntityType(str, Enum):
    site = "site"
    plugin = "plugin"


class OwnerRef(SQLModel):
    owner_type: OwnerType
    owner_id: uuid.UUID

    def to_owner(self) -> Owner:
        return make_owner(self.owner_type, self.owner_id)


class TransferRequest(OwnerRef):
    entity_type: OwnedEntityType
    entity_id: uuid.UUID


class TransferResult(BaseModel):
    entity_type: OwnedEntityType
    entity_id: uuid.UUID
    previous_owner: str
    new_owner: str


class CleanupAction(str, Enum):
    delete = "delete"
    transfer = "transfer"


class OrphanCleanupRequest(SQLModel):
    """How to resolve orphans: delete them, or hand them all to one owner."""

    action: CleanupAction = CleanupAction.delete
    target: OwnerRef | None = None

    @model_validator(mode="after")
    def _target_for_transfer(self) -> Self:
        if self.action == CleanupAction.transfer and self.target is None:
            raise ValueError("target is required when action is transfer")
        return self


class OrphanRead(BaseModel):
    id: uuid.UUID
    name: str
    owner_type: OwnerType
    owner_id: uuid.UUID


class CorruptVersionRead(BaseModel):
    plugin_id: uuid.UUID
    plugin_name: str
    version: str
    reason: str


class CleanupReport(BaseModel):
    deleted: int = 0
    transferred: int = 0
    versions_removed: int = 0
