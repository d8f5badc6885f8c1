"""Polymorphic owner of a site or plugin.

Rows store the owner as two columns, ``owner_type`` and ``owner_id``. Code
never reads those columns directly; it goes through ``owner_of`` and
``set_owner`` so every branch over the owner kind is an exhaustive match on
the ``Owner`` union.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import assert_never

from sqlmodel import Field


class OwnerType(str, Enum):
    user = "user"
    team = "team"


@dataclass(frozen=True)
class UserOwner:
    id: uuid.UUID

    @property
    def type(self) -> OwnerType:
        return OwnerType.user


@dataclass(frozen=True)
class TeamOwner:
    id: uuid.UUID

    @property
    def type(self) -> OwnerType:
        return OwnerType.team


Owner = UserOwner | TeamOwner


class OwnedMixin:
    """Mixin adding the owner columns to a table model."""

    owner_type: OwnerType = Field(max_length=10, index=True)
    owner_id: uuid.UUID = Field(index=True)


def make_owner(owner_type: OwnerType, owner_id: uuid.UUID) -> Owner:
    match owner_type:
        case OwnerType.user:
            return UserOwner(owner_id)
        case OwnerType.team:
            return TeamOwner(owner_id)
        case _:
            assert_never(owner_type)


def owner_of(entity: OwnedMixin) -> Owner:
    return make_owner(OwnerType(entity.owner_type), entity.owner_id)


def set_owner(entity: OwnedMixin, owner: Owner) -> None:
    entity.owner_type = owner.type
    entity.owner_id = owner.id


def describe_owner(owner: Owner) -> str:
    """Render an owner as ``user:<id>`` / ``team:<id>`` for audit entries."""
    return f"{owner.type.value}:{owner.id}"
