"""Expand the recipient a sender picked into the fields stored on a Message.

Expansion runs once, at send time, against the current users and team
memberships. Later membership changes never change who a message reached.
"""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import assert_never

from sqlmodel import Session, col, select

from wphub.messaging.exceptions import (
    InvalidRecipientError,
    NoRecipientsError,
    RecipientNotAllowedError,
)
from wphub.messaging.models import RecipientType
from wphub.messaging.schemas import (
    LogicalRecipient,
    MessageContext,
    MessageCreate,
    TeammateMode,
)
from wphub.team.membership import is_effective_member, teammates_of
from wphub.team.models import Team
from wphub.team.service import get_team
from wphub.user.models import User, UserStatus

# Recipients any signed-in user may address; everything else is admin-only.
OPEN_RECIPIENTS = frozenset({LogicalRecipient.admin, LogicalRecipient.teammates})

# Deliveries that only reach the ids in recipient_ids.
_LIST_DELIVERIES = frozenset(
    {
        RecipientType.multiple_users,
        RecipientType.all_users,
        RecipientType.all_team_owners,
        RecipientType.multiple_teams,
        RecipientType.all_team_inboxes,
    }
)

CONTEXT_PREFIXES = {
    "site": "Site:",
    "plugin": "Plugin:",
    "team": "Team:",
    "user": "User:",
}


@dataclass
class Delivery:
    recipient_type: RecipientType
    recipient_id: uuid.UUID | None = None
    recipient_email: str | None = None
    recipient_ids: list[str] = field(default_factory=list)
    team_id: uuid.UUID | None = None


def default_subject(context: MessageContext | None) -> str:
    """``Plugin: Akismet`` style subject for a message sent from an entity page."""
    if context is None or not context.name:
        return ""
    prefix = CONTEXT_PREFIXES.get(context.type, "")
    return f"{prefix} {context.name}".strip()


def _unique(ids: Iterable[uuid.UUID]) -> list[uuid.UUID]:
    return list(dict.fromkeys(ids))


def expand_teammates(
    team: Team,
    sender_id: uuid.UUID,
    mode: TeammateMode,
    *,
    recipient_id: uuid.UUID | None = None,
    recipient_ids: Iterable[uuid.UUID] = (),
) -> Delivery:
    """Resolve a teammates send against ``team``'s current member list.

    Teammates are the owner and active members other than the sender.
    """
    teammates = teammates_of(team, sender_id)
    match mode:
        case TeammateMode.individual:
            if recipient_id is None or recipient_id not in teammates:
                raise InvalidRecipientError("Recipient is not one of your teammates")
            return Delivery(RecipientType.user, recipient_id=recipient_id)
        case TeammateMode.all:
            if not teammates:
                raise NoRecipientsError("This team has no other members")
            return Delivery(
                RecipientType.multiple_users,
                recipient_ids=[str(user_id) for user_id in teammates],
            )
        case TeammateMode.team_inbox:
            return Delivery(RecipientType.team, recipient_id=team.id, team_id=team.id)
        case TeammateMode.owner:
            if team.owner_id == sender_id:
                raise InvalidRecipientError("You are the owner of this team")
            return Delivery(RecipientType.user, recipient_id=team.owner_id)
        case TeammateMode.selection:
            chosen = _unique(recipient_ids)
            if not chosen:
                raise NoRecipientsError()
            strangers = [user_id for user_id in chosen if user_id not in teammates]
            if strangers:
                raise InvalidRecipientError("Selection contains users outside the team")
            return Delivery(
                RecipientType.multiple_users,
                recipient_ids=[str(user_id) for user_id in chosen],
            )
        case _:
            assert_never(mode)


def _existing_user_ids(session: Session, ids: list[uuid.UUID]) -> list[uuid.UUID]:
    found = set(session.exec(select(User.id).where(col(User.id).in_(ids))).all())
    missing = [user_id for user_id in ids if user_id not in found]
    if missing:
        raise InvalidRecipientError(f"Unknown user: {missing[0]}")
    return ids


def _existing_team_ids(session: Session, ids: list[uuid.UUID]) -> list[uuid.UUID]:
    found = set(session.exec(select(Team.id).where(col(Team.id).in_(ids))).all())
    missing = [team_id for team_id in ids if team_id not in found]
    if missing:
        raise InvalidRecipientError(f"Unknown team: {missing[0]}")
    return ids


def _as_strings(ids: Iterable[uuid.UUID]) -> list[str]:
    return [str(i) for i in ids]


def expand_recipients(session: Session, sender: User, data: MessageCreate) -> Delivery:
    """Turn the requested recipient into concrete stored recipient fields.

    Raises:
        RecipientNotAllowedError: a non-admin picked an admin-only recipient
        InvalidRecipientError: a named user or team does not exist, or is not
            reachable by the sender
        NoRecipientsError: the expansion reached nobody
    """
    kind = data.recipient_type
    if kind not in OPEN_RECIPIENTS and not sender.is_admin:
        raise RecipientNotAllowedError()

    delivery: Delivery
    match kind:
        case LogicalRecipient.admin:
            delivery = Delivery(RecipientType.admin)
        case LogicalRecipient.teammates:
            if data.team_id is None:
                raise InvalidRecipientError("team_id is required for teammates")
            team = get_team(session, data.team_id)
            if not is_effective_member(team, sender.id):
                raise RecipientNotAllowedError("You are not a member of this team")
            delivery = expand_teammates(
                team,
                sender.id,
                data.teammate_mode,
                recipient_id=data.recipient_id,
                recipient_ids=data.recipient_ids,
            )
        case LogicalRecipient.user:
            if data.recipient_id is None:
                raise InvalidRecipientError("recipient_id is required")
            _existing_user_ids(session, [data.recipient_id])
            delivery = Delivery(RecipientType.user, recipient_id=data.recipient_id)
        case LogicalRecipient.multiple_users:
            ids = _existing_user_ids(session, _unique(data.recipient_ids))
            delivery = Delivery(
                RecipientType.multiple_users, recipient_ids=_as_strings(ids)
            )
        case LogicalRecipient.all_users:
            ids = session.exec(
                select(User.id)
                .where(User.status == UserStatus.active)
                .where(User.id != sender.id)
            ).all()
            delivery = Delivery(RecipientType.all_users, recipient_ids=_as_strings(ids))
        case LogicalRecipient.all_team_owners:
            owners = _unique(session.exec(select(Team.owner_id)).all())
            delivery = Delivery(
                RecipientType.all_team_owners,
                recipient_ids=_as_strings(o for o in owners if o != sender.id),
            )
        case LogicalRecipient.team:
            team_id = data.team_id or data.recipient_id
            if team_id is None:
                raise InvalidRecipientError("team_id is required")
            _existing_team_ids(session, [team_id])
            delivery = Delivery(
                RecipientType.team, recipient_id=team_id, team_id=team_id
            )
        case LogicalRecipient.multiple_teams:
            ids = _existing_team_ids(session, _unique(data.recipient_ids))
            delivery = Delivery(
                RecipientType.multiple_teams, recipient_ids=_as_strings(ids)
            )
        case LogicalRecipient.all_team_inboxes:
            ids = session.exec(select(Team.id)).all()
            delivery = Delivery(
                RecipientType.all_team_inboxes, recipient_ids=_as_strings(ids)
            )
        case _:
            assert_never(kind)

    if delivery.recipient_type in _LIST_DELIVERIES and not delivery.recipient_ids:
        raise NoRecipientsError()

    if delivery.recipient_type == RecipientType.user and delivery.recipient_id:
        recipient = session.get(User, delivery.recipient_id)
        delivery.recipient_email = recipient.email if recipient else None
    return delivery

