"""Pure membership rules over a team's member list.

A user is effectively in a team when they own it or appear in ``members``
with status ``active``. Pending entries are invite placeholders and grant
nothing.
"""

import uuid
from collections.abc import Iterable
from datetime import datetime

from wphub.team.models import MemberStatus, Team, TeamRole
from wphub.team.schemas import TeamMember, TeamSettings


def members_of(team: Team) -> list[TeamMember]:
    return [TeamMember.model_validate(raw) for raw in team.members or []]


def set_members(team: Team, members: Iterable[TeamMember]) -> None:
    # Assign a fresh list so SQLAlchemy sees the JSON column change.
    team.members = [member.model_dump(mode="json") for member in members]


def settings_of(team: Team) -> TeamSettings:
    return TeamSettings.model_validate(team.settings or {})


def find_member(team: Team, user_id: uuid.UUID) -> TeamMember | None:
    for member in members_of(team):
        if member.user_id == user_id:
            return member
    return None


def is_effective_member(team: Team, user_id: uuid.UUID) -> bool:
    if team.owner_id == user_id:
        return True
    member = find_member(team, user_id)
    return member is not None and member.status == MemberStatus.active


def get_user_role(team: Team, user_id: uuid.UUID) -> str | None:
    """Resolve the lowercase role name of a user in a team.

    The owner is always ``owner``; active members map their team role;
    pending members and strangers have no role.
    """
    if team.owner_id == user_id:
        return "owner"
    member = find_member(team, user_id)
    if member is None or member.status != MemberStatus.active:
        return None
    return member.team_role_id.value.lower()


def can_manage_team(team: Team, user_id: uuid.UUID) -> bool:
    return get_user_role(team, user_id) in {"owner", "admin"}


def can_invite(team: Team, user_id: uuid.UUID) -> bool:
    role = get_user_role(team, user_id)
    if role in {"owner", "admin"}:
        return True
    return role is not None and settings_of(team).allow_member_invites


def accept_into_members(
    members: list[TeamMember],
    *,
    user_id: uuid.UUID,
    email: str,
    team_role_id: TeamRole,
    joined_at: datetime,
) -> list[TeamMember]:
    """Return the member list after ``user_id`` accepts an invite.

    An existing entry for the user is flipped to active in place and keeps
    its role; otherwise one active entry is appended. The input list is not
    modified.
    """
    result: list[TeamMember] = []
    found = False
    for member in members:
        if member.user_id == user_id and not found:
            found = True
            result.append(
                member.model_copy(
                    update={
                        "status": MemberStatus.active,
                        "joined_at": member.joined_at or joined_at,
                    }
                )
            )
        elif member.user_id == user_id:
            # Drop stray duplicates of the same user.
            continue
        else:
            result.append(member)

    if not found:
        result.append(
            TeamMember(
                user_id=user_id,
                email=email,
                team_role_id=team_role_id,
                status=MemberStatus.active,
                joined_at=joined_at,
            )
        )
    return result


def teammates_of(team: Team, sender_id: uuid.UUID) -> list[uuid.UUID]:
    """The owner and active members of a team, minus the sender, without duplicates."""
    seen: set[uuid.UUID] = set()
    result: list[uuid.UUID] = []

    candidates = [team.owner_id] + [
        member.user_id
        for member in members_of(team)
        if member.status == MemberStatus.active
    ]
    for user_id in candidates:
        if user_id == sender_id or user_id in seen:
            continue
        seen.add(user_id)
        result.append(user_id)
    return result
