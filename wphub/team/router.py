"""Team domain router.

Teams, member management and the invite workflow.
"""

import uuid

from fastapi import APIRouter, Depends, status

from wphub.auth.dependencies import AdminUserDep, CurrentUserDep, require_auth
from wphub.core.constants import CommonResponses, Routes
from wphub.core.deps import SessionDep
from wphub.team import service
from wphub.team.membership import get_user_role
from wphub.team.models import Team
from wphub.team.schemas import (
    InviteCreate,
    InviteRead,
    TeamCreate,
    TeamRead,
    TeamUpdate,
    TeamWithRole,
)
from wphub.user.models import User

router = APIRouter(
    prefix=Routes.TEAM.prefix,
    tags=[Routes.TEAM.tag],
    dependencies=[Depends(require_auth)],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)


def _with_role(team: Team, user: User) -> TeamWithRole:
    read = TeamWithRole.model_validate(team, from_attributes=True)
    read.my_role = get_user_role(team, user.id)
    return read


@router.get("/", response_model=list[TeamWithRole])
async def list_my_teams(user: CurrentUserDep, session: SessionDep):
    """Teams the current user owns or belongs to, plus teams inviting them."""
    teams = service.user_teams(session, user, include_pending=True)
    return [_with_role(team, user) for team in teams]


@router.post("/", response_model=TeamRead, status_code=status.HTTP_201_CREATED)
async def create_team(data: TeamCreate, user: CurrentUserDep, session: SessionDep):
    return service.create_team(session, user, data)


@router.get("/invites/pending", response_model=list[InviteRead])
async def list_my_pending_invites(user: CurrentUserDep, session: SessionDep):
    """Pending invites addressed to the current user's email."""
    return service.pending_invites_for(session, user)


@router.post(
    "/invites/{invite_id}/accept",
    response_model=TeamRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def accept_invite(invite_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    return service.accept_invite(session, invite_id, user)


@router.post(
    "/invites/{invite_id}/decline",
    response_model=InviteRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def decline_invite(
    invite_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    return service.decline_invite(session, invite_id, user)


@router.get(
    "/{team_id}",
    response_model=TeamWithRole,
    responses={**CommonResponses.NOT_FOUND},
)
async def get_team(team_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    team = service.get_team_for_user(session, team_id, user)
    return _with_role(team, user)


@router.patch(
    "/{team_id}",
    response_model=TeamRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def update_team(
    team_id: uuid.UUID, data: TeamUpdate, user: CurrentUserDep, session: SessionDep
):
    team = service.get_team_for_user(session, team_id, user)
    return service.update_team(session, team, user, data)


@router.delete(
    "/{team_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
async def delete_team(team_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    team = service.get_team_for_user(session, team_id, user)
    service.delete_team(session, team, user)


@router.get(
    "/{team_id}/invites",
    response_model=list[InviteRead],
    responses={**CommonResponses.NOT_FOUND},
)
async def list_team_invites(
    team_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    team = service.get_team_for_user(session, team_id, user)
    return service.list_team_invites(session, team, user)


@router.post(
    "/{team_id}/invites",
    response_model=InviteRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def invite_member(
    team_id: uuid.UUID, data: InviteCreate, user: CurrentUserDep, session: SessionDep
):
    team = service.get_team_for_user(session, team_id, user)
    return service.invite_member(session, team, user, data)


@router.delete(
    "/{team_id}/invites/{invite_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.BAD_REQUEST},
)
async def revoke_invite(
    team_id: uuid.UUID,
    invite_id: uuid.UUID,
    user: CurrentUserDep,
    session: SessionDep,
):
    team = service.get_team_for_user(session, team_id, user)
    service.revoke_invite(session, team, user, invite_id)


@router.delete(
    "/{team_id}/members/{member_id}",
    response_model=TeamRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.BAD_REQUEST},
)
async def remove_member(
    team_id: uuid.UUID,
    member_id: uuid.UUID,
    user: CurrentUserDep,
    session: SessionDep,
):
    team = service.get_team_for_user(session, team_id, user)
    return service.remove_member(session, team, user, member_id)


@router.post(
    "/{team_id}/block",
    response_model=TeamRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def block_team(team_id: uuid.UUID, admin: AdminUserDep, session: SessionDep):
    """Block a team. Admin only."""
    team = service.get_team(session, team_id)
    return service.set_team_blocked(session, team, admin, True)


@router.post(
    "/{team_id}/unblock",
    response_model=TeamRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def unblock_team(team_id: uuid.UUID, admin: AdminUserDep, session: SessionDep):
    """Unblock a team. Admin only."""
    team = service.get_team(session, team_id)
    return service.set_team_blocked(session, team, admin, False)
