"""Messaging routers: messages between users and teams, and notifications."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from wphub.auth.dependencies import AdminUserDep, CurrentUserDep, require_auth
from wphub.core.constants import CommonResponses, Routes
from wphub.core.deps import SessionDep, SettingsDep
from wphub.messaging import service
from wphub.messaging.schemas import (
    MessageCreate,
    MessageRead,
    NotificationCreate,
    NotificationRead,
    ReplyCreate,
    UnreadCount,
)
from wphub.team.schemas import TeamRead
from wphub.team.service import accept_invite_from_notification

router = APIRouter(
    prefix=Routes.MESSAGE.prefix,
    tags=[Routes.MESSAGE.tag],
    dependencies=[Depends(require_auth)],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)

notifications_router = APIRouter(
    prefix=Routes.NOTIFICATION.prefix,
    tags=[Routes.NOTIFICATION.tag],
    dependencies=[Depends(require_auth)],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)


# --- Messages ---


@router.post(
    "/",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.BAD_REQUEST},
)
async def send_message(data: MessageCreate, user: CurrentUserDep, session: SessionDep):
    return service.send_message(session, user, data)


@router.get("/", response_model=list[MessageRead])
async def list_inbox(user: CurrentUserDep, session: SessionDep):
    """Messages addressed to the current user or their team inboxes."""
    return service.inbox(session, user)


@router.get("/sent", response_model=list[MessageRead])
async def list_sent(user: CurrentUserDep, session: SessionDep):
    return service.sent_messages(session, user)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_message_count(
    user: CurrentUserDep, session: SessionDep, settings: SettingsDep
):
    return UnreadCount(
        count=service.unread_message_count(session, user),
        poll_interval_seconds=settings.unread_poll_interval_seconds,
    )


@router.get(
    "/{message_id}",
    response_model=MessageRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def get_message(message_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    return service.get_message_for_user(session, message_id, user)


@router.post(
    "/{message_id}/read",
    response_model=MessageRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def mark_message_read(
    message_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    message = service.get_message_for_user(session, message_id, user)
    return service.mark_message_read(session, message, user)


@router.post(
    "/{message_id}/replies",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND},
)
async def reply_to_message(
    message_id: uuid.UUID, data: ReplyCreate, user: CurrentUserDep, session: SessionDep
):
    message = service.get_message_for_user(session, message_id, user)
    return service.add_reply(session, message, user, data)


# --- Notifications ---


@notifications_router.get("/", response_model=list[NotificationRead])
async def list_notifications(
    user: CurrentUserDep,
    session: SessionDep,
    limit: Annotated[int | None, Query(ge=1, le=200)] = None,
):
    """The current user's notifications, latest first."""
    return service.list_notifications(session, user, limit=limit)


@notifications_router.get("/unread-count", response_model=UnreadCount)
async def unread_notification_count(
    user: CurrentUserDep, session: SessionDep, settings: SettingsDep
):
    return UnreadCount(
        count=service.unread_notification_count(session, user),
        poll_interval_seconds=settings.unread_poll_interval_seconds,
    )


@notifications_router.post("/read-all")
async def mark_all_notifications_read(user: CurrentUserDep, session: SessionDep):
    return {"updated": service.mark_all_notifications_read(session, user)}


@notifications_router.post(
    "/",
    response_model=list[NotificationRead],
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND},
)
async def send_notification(
    data: NotificationCreate, admin: AdminUserDep, session: SessionDep
):
    """Send a notification to a user or a team's active members. Admin only."""
    return service.send_notification(session, admin, data)


@notifications_router.post(
    "/{notification_id}/read",
    response_model=NotificationRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def mark_notification_read(
    notification_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    notification = service.get_notification_for_user(session, notification_id, user)
    return service.mark_notification_read(session, notification)


@notifications_router.post(
    "/{notification_id}/accept-invite",
    response_model=TeamRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def accept_invite(
    notification_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    """Accept the team invite a ``team_invite`` notification points at."""
    return accept_invite_from_notification(session, notification_id, user)
