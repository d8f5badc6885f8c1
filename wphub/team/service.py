"""Team domain service.

Team lifecycle, invitations and membership reconciliation. Every workflow
stages all of its writes (team, invite, notifications, audit entry) in the
caller's session and commits once, so a failure leaves nothing half-applied.
"""

import logging
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select

from wphub.activity.models import EntityType
from wphub.activity.service import log_activity
from wphub.core.email import send_team_invite_email
from wphub.core.exceptions import NotFoundError, PermissionDeniedError
from wphub.core.mixins import utc_now
from wphub.db.commit import commit_or_rollback
from wphub.db.json import json_text_contains
from wphub.messaging.models import Notification, NotificationType
from wphub.team.exceptions import (
    AlreadyMemberError,
    InviteExistsError,
    InviteNotFoundError,
    InviteNotPendingError,
    OwnerRemovalError,
    TeamBlockedError,
    TeamNotFoundError,
    TeamPermissionError,
)
from wphub.team.membership import (
    accept_into_members,
    can_invite,
    can_manage_team,
    find_member,
    is_effective_member,
    members_of,
    set_members,
    settings_of,
)
from wphub.team.models import InviteStatus, MemberStatus, Team, TeamInvite, TeamRole
from wphub.team.schemas import InviteCreate, TeamCreate, TeamMember, TeamUpdate
from wphub.user.models import User

logger = logging.getLogger(__name__)


def user_teams(
    session: Session, user: User, *, include_pending: bool = False
) -> list[Team]:
    """Teams the user owns or is an active member of.

    ``include_pending`` also returns teams where the user only holds a
    pending invite placeholder.
    """
    statement = select(Team).where(
        or_(
            Team.owner_id == user.id,
            json_text_contains(Team.members, str(user.id)),
        )
    )
    teams = []
    for team in session.exec(statement).all():
        if is_effective_member(team, user.id):
            teams.append(team)
        elif include_pending and find_member(team, user.id) is not None:
            teams.append(team)
    return teams


def user_team_ids(session: Session, user: User) -> set[uuid.UUID]:
    return {team.id for team in user_teams(session, user)}


def get_team(session: Session, team_id: uuid.UUID) -> Team:
    team = session.get(Team, team_id)
    if team is None:
        raise TeamNotFoundError()
    return team


def get_team_for_user(session: Session, team_id: uuid.UUID, user: User) -> Team:
    """Load a team the user may see; strangers get a 404, not a 403."""
    team = get_team(session, team_id)
    if user.is_admin or find_member(team, user.id) or team.owner_id == user.id:
        return team
    raise TeamNotFoundError()


def _require_manager(team: Team, user: User) -> None:
    if user.is_admin or can_manage_team(team, user.id):
        return
    raise TeamPermissionError()


def create_team(session: Session, owner: User, data: TeamCreate) -> Team:
    """Create a team owned by ``owner``, who also becomes its first active member."""
    team = Team(
        name=data.name,
        description=data.description,
        owner_id=owner.id,
        created_by=owner.email,
    )
    set_members(
        team,
        [
            TeamMember(
                user_id=owner.id,
                email=owner.email,
                team_role_id=TeamRole.owner,
                status=MemberStatus.active,
                joined_at=utc_now(),
            )
        ],
    )
    session.add(team)
    log_activity(
        session,
        user_email=owner.email,
        action=f"Created team: {team.name}",
        entity_type=EntityType.team,
        entity_id=team.id,
    )
    commit_or_rollback(session, "create team")
    session.refresh(team)
    return team


def update_team(session: Session, team: Team, user: User, data: TeamUpdate) -> Team:
    _require_manager(team, user)
    update_data = data.model_dump(exclude_unset=True)
    if "settings" in update_data and data.settings is not None:
        team.settings = data.settings.model_dump(mode="json")
        update_data.pop("settings")
    for key, value in update_data.items():
        setattr(team, key, value)
    session.add(team)
    log_activity(
        session,
        user_email=user.email,
        action=f"Updated team: {team.name}",
        entity_type=EntityType.team,
        entity_id=team.id,
    )
    commit_or_rollback(session, "update team")
    session.refresh(team)
    return team


def delete_team(session: Session, team: Team, user: User) -> None:
    """Delete a team and its outstanding invites.

    Sites and plugins owned by the team are left in place; they show up in
    the orphan scan afterwards.
    """
    if not (user.is_admin or team.owner_id == user.id):
        raise TeamPermissionError("Only the team owner can delete the team")

    invites = session.exec(select(TeamInvite).where(TeamInvite.team_id == team.id))
    for invite in invites.all():
        session.delete(invite)
    log_activity(
        session,
        user_email=user.email,
        action=f"Deleted team: {team.name}",
        entity_type=EntityType.team,
        entity_id=team.id,
    )
    session.delete(team)
    commit_or_rollback(session, "delete team")
    logger.info("Team %s deleted", team.id, extra={"team_id": str(team.id)})


def set_team_blocked(session: Session, team: Team, admin: User, blocked: bool) -> Team:
    team.is_blocked = blocked
    session.add(team)
    log_activity(
        session,
        user_email=admin.email,
        action=f"{'Blocked' if blocked else 'Unblocked'} team: {team.name}",
        entity_type=EntityType.team,
        entity_id=team.id,
    )
    commit_or_rollback(session, "update team")
    session.refresh(team)
    return team


def invite_member(
    session: Session, team: Team, inviter: User, data: InviteCreate
) -> TeamInvite:
    """Invite an email address to a team.

    If the address belongs to an existing user, a pending member placeholder
    and a ``team_invite`` notification are created as well. The invitation
    email is sent after the commit and its failure does not undo the invite.
    """
    if team.is_blocked:
        raise TeamBlockedError()
    if not can_invite(team, inviter.id):
        raise TeamPermissionError("You are not allowed to invite members to this team")

    email = data.email.lower()
    role = data.team_role_id or settings_of(team).default_team_role_id
    if role == TeamRole.owner:
        raise PermissionDeniedError("The owner role cannot be granted by invite")

    invitee = session.exec(select(User).where(func.lower(User.email) == email)).first()
    if invitee is not None and is_effective_member(team, invitee.id):
        raise AlreadyMemberError()

    if _pending_invites(session, team, email):
        raise InviteExistsError()

    invite = TeamInvite(
        team_id=team.id,
        invited_email=email,
        team_role_id=role,
        invited_by=inviter.email,
        created_by=inviter.email,
    )
    session.add(invite)

    if invitee is not None:
        if find_member(team, invitee.id) is None:
            set_members(
                team,
                [
                    *members_of(team),
                    TeamMember(
                        user_id=invitee.id,
                        email=invitee.email,
                        team_role_id=role,
                        status=MemberStatus.pending,
                    ),
                ],
            )
            session.add(team)
        session.add(
            Notification(
                recipient_id=invitee.id,
                title=f"Team invitation: {team.name}",
                message=f"{inviter.full_name or inviter.email} invited you to join "
                f"{team.name} as {role.value}.",
                type=NotificationType.team_invite,
                team_invite_id=invite.id,
            )
        )

    log_activity(
        session,
        user_email=inviter.email,
        action=f"Invited {email} to team: {team.name}",
        entity_type=EntityType.team,
        entity_id=team.id,
    )
    commit_or_rollback(session, "create invite")
    session.refresh(invite)

    try:
        send_team_invite_email(
            to_email=email,
            team_name=team.name,
            invited_by=inviter.full_name or inviter.email,
            team_role=role.value,
        )
    except Exception:
        logger.exception(
            "Team invite email failed", extra={"team_id": str(team.id)}
        )

    return invite


def pending_invites_for(session: Session, user: User) -> list[TeamInvite]:
    statement = (
        select(TeamInvite)
        .where(func.lower(TeamInvite.invited_email) == user.email.lower())
        .where(TeamInvite.status == InviteStatus.pending)
    )
    return list(session.exec(statement).all())


def list_team_invites(session: Session, team: Team, user: User) -> list[TeamInvite]:
    _require_manager(team, user)
    statement = select(TeamInvite).where(TeamInvite.team_id == team.id)
    return list(session.exec(statement).all())


def _pending_invites(session: Session, team: Team, email: str) -> list[TeamInvite]:
    statement = (
        select(TeamInvite)
        .where(TeamInvite.team_id == team.id)
        .where(func.lower(TeamInvite.invited_email) == email.lower())
        .where(TeamInvite.status == InviteStatus.pending)
    )
    return list(session.exec(statement).all())


def _withdraw_invites(session: Session, invites: list[TeamInvite]) -> None:
    """Delete invites together with the notifications that offer them."""
    for invite in invites:
        notifications = session.exec(
            select(Notification).where(Notification.team_invite_id == invite.id)
        ).all()
        for notification in notifications:
            session.delete(notification)
        session.delete(invite)


def revoke_invite(
    session: Session, team: Team, user: User, invite_id: uuid.UUID
) -> None:
    """Withdraw a pending invite and drop the invitee's pending placeholder."""
    _require_manager(team, user)
    invite = session.get(TeamInvite, invite_id)
    if invite is None or invite.team_id != team.id:
        raise InviteNotFoundError()
    if invite.status != InviteStatus.pending:
        raise InviteNotPendingError()

    email = invite.invited_email.lower()
    set_members(
        team,
        [
            m
            for m in members_of(team)
            if not (m.status == MemberStatus.pending and m.email.lower() == email)
        ],
    )
    session.add(team)
    _withdraw_invites(session, [invite])
    log_activity(
        session,
        user_email=user.email,
        action=f"Revoked invite for {email} to team: {team.name}",
        entity_type=EntityType.team,
        entity_id=team.id,
    )
    commit_or_rollback(session, "revoke invite")


def _load_invite_for(session: Session, invite_id: uuid.UUID, user: User) -> TeamInvite:
    invite = session.get(TeamInvite, invite_id)
    if invite is None:
        raise InviteNotFoundError()
    if invite.invited_email.lower() != user.email.lower():
        # Do not reveal invites addressed to someone else.
        raise InviteNotFoundError()
    if invite.status != InviteStatus.pending:
        raise InviteNotPendingError()
    return invite


def accept_invite(session: Session, invite_id: uuid.UUID, user: User) -> Team:
    """Accept a pending invite on behalf of ``user``.

    Marks the invite accepted, reconciles the team's member list (flipping an
    existing placeholder to active with its role intact, or appending one
    active entry), marks the invite's notifications read and records the
    join. All of it commits together.
    """
    invite = _load_invite_for(session, invite_id, user)

    team = session.get(Team, invite.team_id)
    if team is None:
        raise TeamNotFoundError()
    if team.is_blocked:
        raise TeamBlockedError()

    now = utc_now()
    invite.status = InviteStatus.accepted
    invite.accepted_at = now
    session.add(invite)

    set_members(
        team,
        accept_into_members(
            members_of(team),
            user_id=user.id,
            email=user.email,
            team_role_id=invite.team_role_id,
            joined_at=now,
        ),
    )
    session.add(team)

    notifications = session.exec(
        select(Notification)
        .where(Notification.recipient_id == user.id)
        .where(Notification.team_invite_id == invite.id)
    ).all()
    for notification in notifications:
        notification.is_read = True
        session.add(notification)

    log_activity(
        session,
        user_email=user.email,
        action=f"Joined team: {team.name}",
        entity_type=EntityType.team,
        entity_id=team.id,
    )
    commit_or_rollback(session, "accept invite")
    session.refresh(team)

    logger.info(
        "Invite %s accepted",
        invite.id,
        extra={"team_id": str(team.id), "user_id": str(user.id)},
    )
    return team


def accept_invite_from_notification(
    session: Session, notification_id: uuid.UUID, user: User
) -> Team:
    notification = session.get(Notification, notification_id)
    if notification is None or notification.recipient_id != user.id:
        raise NotFoundError("Notification not found")
    if notification.team_invite_id is None:
        raise InviteNotFoundError("Notification does not reference an invite")
    return accept_invite(session, notification.team_invite_id, user)


def decline_invite(session: Session, invite_id: uuid.UUID, user: User) -> TeamInvite:
    """Decline a pending invite. Membership and notifications are untouched."""
    invite = _load_invite_for(session, invite_id, user)
    invite.status = InviteStatus.declined
    session.add(invite)
    commit_or_rollback(session, "decline invite")
    session.refresh(invite)
    return invite


def remove_member(
    session: Session, team: Team, actor: User, member_id: uuid.UUID
) -> Team:
    """Remove a member entry. Managers may remove anyone but the owner;
    members may remove themselves."""
    if member_id == team.owner_id:
        raise OwnerRemovalError()
    if member_id != actor.id:
        _require_manager(team, actor)

    members = members_of(team)
    removed = next((m for m in members if m.user_id == member_id), None)
    if removed is None:
        raise NotFoundError("Member not found")

    set_members(team, [m for m in members if m.user_id != member_id])
    session.add(team)
    _withdraw_invites(session, _pending_invites(session, team, removed.email))
    log_activity(
        session,
        user_email=actor.email,
        action=f"Removed member from team: {team.name}",
        entity_type=EntityType.team,
        entity_id=team.id,
        details=f"user:{member_id}",
    )
    commit_or_rollback(session, "remove member")
    session.refresh(team)
    return team
