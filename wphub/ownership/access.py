"""Who may see and who may manage an owned site or plugin.

A row is visible to its owning user, to effective members of its owning
team, and to effective members of any team listed in ``shared_with_teams``.
Managing (deleting, installing, testing) requires ownership: the owning
user, or an Owner/Admin/Manager of the owning team. Platform admins may do
both.
"""

import uuid
from typing import Any, assert_never

from sqlalchemy import and_, or_
from sqlmodel import Session, select

from wphub.db.json import json_text_contains
from wphub.ownership.owner import Owner, OwnerType, TeamOwner, UserOwner, owner_of
from wphub.team.exceptions import TeamBlockedError, TeamPermissionError
from wphub.team.membership import get_user_role
from wphub.team.models import Team
from wphub.team.service import get_team
from wphub.user.models import User

MANAGER_ROLES = frozenset({"owner", "admin", "manager"})


def is_owned_by(owner: Owner, user: User, team_ids: set[uuid.UUID]) -> bool:
    match owner:
        case UserOwner(id=owner_id):
            return owner_id == user.id
        case TeamOwner(id=team_id):
            return team_id in team_ids
        case _:
            assert_never(owner)


def is_shared_with(entity: Any, team_ids: set[uuid.UUID]) -> bool:
    shared = set(entity.shared_with_teams or [])
    return any(str(team_id) in shared for team_id in team_ids)


def is_visible_to(entity: Any, user: User, team_ids: set[uuid.UUID]) -> bool:
    if user.is_admin:
        return True
    return is_owned_by(owner_of(entity), user, team_ids) or is_shared_with(
        entity, team_ids
    )


def can_manage(session: Session, entity: Any, user: User) -> bool:
    if user.is_admin:
        return True
    owner = owner_of(entity)
    match owner:
        case UserOwner(id=owner_id):
            return owner_id == user.id
        case TeamOwner(id=team_id):
            team = session.get(Team, team_id)
            return team is not None and get_user_role(team, user.id) in MANAGER_ROLES
        case _:
            assert_never(owner)


def visible_rows[M](
    session: Session, model: type[M], user: User, team_ids: set[uuid.UUID]
) -> list[M]:
    """Rows of ``model`` the user can see.

    SQL narrows the candidates (owner match or a textual hit in
    ``shared_with_teams``); the exact rule is then applied in Python.
    """
    table: Any = model
    conditions = [
        and_(table.owner_type == OwnerType.user, table.owner_id == user.id),
    ]
    if team_ids:
        conditions.append(
            and_(table.owner_type == OwnerType.team, table.owner_id.in_(team_ids))
        )
        conditions.extend(
            json_text_contains(table.shared_with_teams, str(team_id))
            for team_id in team_ids
        )
    rows = session.exec(select(model).where(or_(*conditions))).all()
    return [row for row in rows if is_visible_to(row, user, team_ids)]


def resolve_new_owner(
    session: Session, user: User, team_id: uuid.UUID | None
) -> Owner:
    """Owner for a row the user is creating: themselves, or a team they manage."""
    if team_id is None:
        return UserOwner(user.id)
    team = get_team(session, team_id)
    if team.is_blocked:
        raise TeamBlockedError()
    if not (user.is_admin or get_user_role(team, user.id) in MANAGER_ROLES):
        raise TeamPermissionError("You cannot add items to this team's library")
    return TeamOwner(team.id)
