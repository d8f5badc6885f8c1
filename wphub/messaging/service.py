"""Messaging domain service.

A message reaches a user when it names them personally (``recipient_id``
or ``recipient_ids``), when it goes to the inbox of a team they are
effectively in, or when it is addressed to admins and they are one. The
``is_read`` flag is shared by everyone the message reaches.
"""

import logging
import uuid

from sqlalchemy import and_, or_
from sqlmodel import Session, col, select

from wphub.activity.models import EntityType
from wphub.activity.service import log_activity
from wphub.core.exceptions import ValidationError
from wphub.core.mixins import utc_now
from wphub.db.commit import commit_or_rollback
from wphub.db.json import json_text_contains
from wphub.messaging.exceptions import MessageNotFoundError, NotificationNotFoundError
from wphub.messaging.models import (
    PERSONAL_RECIPIENT_TYPES,
    TEAM_RECIPIENT_TYPES,
    Message,
    Notification,
    RecipientType,
)
from wphub.messaging.recipients import default_subject, expand_recipients
from wphub.messaging.schemas import (
    MessageCreate,
    NotificationCreate,
    Reply,
    ReplyCreate,
)
from wphub.team.membership import members_of
from wphub.team.models import MemberStatus
from wphub.team.service import get_team, user_team_ids
from wphub.user.models import User

logger = logging.getLogger(__name__)


def send_message(session: Session, sender: User, data: MessageCreate) -> Message:
    subject = data.subject.strip() or default_subject(data.context)
    if not subject:
        raise ValidationError("A subject is required")

    delivery = expand_recipients(session, sender, data)
    message = Message(
        sender_id=sender.id,
        sender_email=sender.email,
        sender_name=sender.full_name or sender.email,
        recipient_type=delivery.recipient_type,
        recipient_id=delivery.recipient_id,
        recipient_email=delivery.recipient_email,
        recipient_ids=delivery.recipient_ids,
        team_id=delivery.team_id,
        subject=subject,
        message=data.message,
        priority=data.priority,
        category=data.category.value,
        context=data.context.model_dump() if data.context else None,
        created_by=sender.email,
    )
    session.add(message)
    log_activity(
        session,
        user_email=sender.email,
        action=f"Sent message: {subject}",
        entity_type=EntityType.message,
        entity_id=message.id,
        details=f"To {delivery.recipient_type.value}",
    )
    commit_or_rollback(session, "send message")
    session.refresh(message)
    logger.info(
        "Message %s sent to %s",
        message.id,
        delivery.recipient_type.value,
        extra={"user_id": str(sender.id)},
    )
    return message


def is_addressed_to(message: Message, user: User, team_ids: set[uuid.UUID]) -> bool:
    """Whether ``message`` reaches ``user``, given the teams they are effectively in.

    The sender is never a recipient of their own message, even when it goes
    to a team or group they belong to.
    """
    if message.sender_id == user.id:
        return False
    kind = RecipientType(message.recipient_type)
    if kind == RecipientType.admin:
        return user.is_admin
    if kind == RecipientType.user:
        return message.recipient_id == user.id
    if kind in PERSONAL_RECIPIENT_TYPES:
        return str(user.id) in (message.recipient_ids or [])
    if kind == RecipientType.team:
        return message.team_id in team_ids
    if kind in TEAM_RECIPIENT_TYPES:
        targets = set(message.recipient_ids or [])
        return any(str(team_id) in targets for team_id in team_ids)
    return False


def inbox(session: Session, user: User) -> list[Message]:
    """Messages reaching the user, newest first, each listed once."""
    team_ids = user_team_ids(session, user)
    conditions = [
        col(Message.recipient_id) == user.id,
        json_text_contains(Message.recipient_ids, str(user.id)),
    ]
    if user.is_admin:
        conditions.append(col(Message.recipient_type) == RecipientType.admin)
    if team_ids:
        conditions.append(
            and_(
                col(Message.recipient_type) == RecipientType.team,
                col(Message.team_id).in_(team_ids),
            )
        )
        conditions.extend(
            json_text_contains(Message.recipient_ids, str(team_id))
            for team_id in team_ids
        )
    statement = (
        select(Message)
        .where(or_(*conditions))
        .order_by(col(Message.created_at).desc())
    )
    return [
        message
        for message in session.exec(statement).all()
        if is_addressed_to(message, user, team_ids)
    ]


def sent_messages(session: Session, user: User) -> list[Message]:
    statement = (
        select(Message)
        .where(Message.sender_id == user.id)
        .order_by(col(Message.created_at).desc())
    )
    return list(session.exec(statement).all())


def unread_message_count(session: Session, user: User) -> int:
    """Unread messages reaching the user, personal and team inbox together.

    A message counts once however many ways it reaches the user; replies do
    not add to the count.
    """
    return sum(1 for message in inbox(session, user) if not message.is_read)


def get_message_for_user(
    session: Session, message_id: uuid.UUID, user: User
) -> Message:
    message = session.get(Message, message_id)
    if message is None:
        raise MessageNotFoundError()
    if message.sender_id == user.id:
        return message
    if is_addressed_to(message, user, user_team_ids(session, user)):
        return message
    raise MessageNotFoundError()


def mark_message_read(session: Session, message: Message, user: User) -> Message:
    """Mark read on behalf of a recipient; the sender's own view changes nothing."""
    if message.is_read or message.sender_id == user.id:
        return message
    message.is_read = True
    session.add(message)
    commit_or_rollback(session, "mark message read")
    session.refresh(message)
    return message


def add_reply(
    session: Session, message: Message, user: User, data: ReplyCreate
) -> Message:
    """Append a reply.

    A reply from the original sender flags the message unread again so its
    recipients notice it.
    """
    reply = Reply(
        sender_id=user.id,
        sender_email=user.email,
        message=data.message,
        created_at=utc_now(),
    )
    message.replies = [*(message.replies or []), reply.model_dump(mode="json")]
    if user.id == message.sender_id:
        message.is_read = False
    session.add(message)
    commit_or_rollback(session, "add reply")
    session.refresh(message)
    return message


def list_notifications(
    session: Session, user: User, *, limit: int | None = None
) -> list[Notification]:
    statement = (
        select(Notification)
        .where(Notification.recipient_id == user.id)
        .order_by(col(Notification.created_at).desc())
    )
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def unread_notification_count(session: Session, user: User) -> int:
    statement = (
        select(Notification.id)
        .where(Notification.recipient_id == user.id)
        .where(col(Notification.is_read).is_(False))
    )
    return len(session.exec(statement).all())


def get_notification_for_user(
    session: Session, notification_id: uuid.UUID, user: User
) -> Notification:
    notification = session.get(Notification, notification_id)
    if notification is None or notification.recipient_id != user.id:
        raise NotificationNotFoundError()
    return notification


def mark_notification_read(
    session: Session, notification: Notification
) -> Notification:
    notification.is_read = True
    session.add(notification)
    commit_or_rollback(session, "mark notification read")
    session.refresh(notification)
    return notification


def mark_all_notifications_read(session: Session, user: User) -> int:
    unread = session.exec(
        select(Notification)
        .where(Notification.recipient_id == user.id)
        .where(col(Notification.is_read).is_(False))
    ).all()
    for notification in unread:
        notification.is_read = True
        session.add(notification)
    commit_or_rollback(session, "mark notifications read")
    return len(unread)


def send_notification(
    session: Session, admin: User, data: NotificationCreate
) -> list[Notification]:
    """Notify one user, or every active member of a team (owner included)."""
    if data.recipient_id is not None:
        if session.get(User, data.recipient_id) is None:
            raise NotificationNotFoundError("Recipient not found")
        recipients = [data.recipient_id]
        target = f"user:{data.recipient_id}"
    elif data.team_id is not None:
        team = get_team(session, data.team_id)
        recipients = list(
            dict.fromkeys(
                [team.owner_id]
                + [
                    m.user_id
                    for m in members_of(team)
                    if m.status == MemberStatus.active
                ]
            )
        )
        target = f"team:{team.id}"
    else:
        raise ValidationError("Provide exactly one of recipient_id or team_id")

    notifications = [
        Notification(
            recipient_id=recipient_id,
            title=data.title,
            message=data.message,
            type=data.type,
        )
        for recipient_id in recipients
    ]
    session.add_all(notifications)
    log_activity(
        session,
        user_email=admin.email,
        action=f"Sent notification: {data.title}",
        entity_type=EntityType.message,
        details=f"To {target} ({len(notifications)} recipients)",
    )
    commit_or_rollback(session, "send notification")
    for notification in notifications:
        session.refresh(notification)
    return notifications
