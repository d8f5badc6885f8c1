"""User domain router.

Self-service profile updates and admin user management.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session, and_, col, select

from wphub.activity.models import EntityType
from wphub.activity.service import log_activity
from wphub.auth.dependencies import (
    AdminUserDep,
    CurrentUserDep,
    require_admin,
    require_auth,
)
from wphub.core.constants import CommonResponses, Routes
from wphub.core.deps import SessionDep
from wphub.db.commit import commit_or_rollback
from wphub.user.exceptions import (
    EmailExistsError,
    SelfModificationError,
    UserNotFoundError,
)
from wphub.user.models import User, UserRole, UserStatus
from wphub.user.schemas import UserPublicRead, UserRead, UserUpdate, UserUpdateMe

router = APIRouter(
    prefix=Routes.USER.prefix,
    tags=[Routes.USER.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)


def _get_user(session: Session, user_id: uuid.UUID) -> User:
    user = session.get(User, user_id)
    if not user:
        raise UserNotFoundError()
    return user


@router.patch("/me", response_model=UserPublicRead)
async def update_me(
    user: CurrentUserDep, user_update: UserUpdateMe, session: SessionDep
):
    """Update current authenticated user's profile.

    Users can only update their name, company and phone. For security,
    users cannot modify email, role or status.
    """
    update_data = user_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(user, key, value)
    session.add(user)
    commit_or_rollback(session, "update profile")
    session.refresh(user)
    return user


@router.get("/", response_model=list[UserRead], dependencies=[Depends(require_admin)])
async def list_users(session: SessionDep):
    """List all users. Admin only."""
    users = session.exec(select(User).order_by(col(User.created_at).desc())).all()
    return users


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.NOT_FOUND},
)
async def get_user(user_id: uuid.UUID, session: SessionDep):
    """Get a user by ID. Admin only."""
    return _get_user(session, user_id)


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    responses={
        **CommonResponses.NOT_FOUND,
        **CommonResponses.CONFLICT,
        **CommonResponses.BAD_REQUEST,
    },
)
async def update_user(
    user_id: uuid.UUID,
    user_update: UserUpdate,
    admin: AdminUserDep,
    session: SessionDep,
):
    """Update a user by ID. Admin only.

    Admins cannot demote or block themselves.
    """
    user = _get_user(session, user_id)
    update_data = user_update.model_dump(exclude_unset=True)

    if user.id == admin.id and (
        update_data.get("role", UserRole.admin) != UserRole.admin
        or update_data.get("status", UserStatus.active) != UserStatus.active
    ):
        raise SelfModificationError()

    # Check if new email is already taken by another user
    if "email" in update_data and update_data["email"] != user.email:
        email_exists = session.exec(
            select(User).where(
                and_(User.email == update_data["email"], User.id != user_id)
            )
        ).first()
        if email_exists:
            raise EmailExistsError("Email already in use")
    for key, value in update_data.items():
        setattr(user, key, value)

    session.add(user)
    log_activity(
        session,
        user_email=admin.email,
        action=f"Updated user: {user.email}",
        entity_type=EntityType.user,
        entity_id=user.id,
        details=", ".join(sorted(update_data)),
    )
    commit_or_rollback(session, "update user")
    session.refresh(user)
    return user


def _set_status(
    session: Session, admin: User, user_id: uuid.UUID, new_status: UserStatus
) -> User:
    user = _get_user(session, user_id)
    if user.id == admin.id:
        raise SelfModificationError()
    user.status = new_status
    session.add(user)
    verb = "Blocked" if new_status == UserStatus.inactive else "Unblocked"
    log_activity(
        session,
        user_email=admin.email,
        action=f"{verb} user: {user.email}",
        entity_type=EntityType.user,
        entity_id=user.id,
    )
    commit_or_rollback(session, "update user status")
    session.refresh(user)
    return user


@router.post(
    "/{user_id}/block",
    response_model=UserRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.BAD_REQUEST},
)
async def block_user(user_id: uuid.UUID, admin: AdminUserDep, session: SessionDep):
    """Block a user. Admin only."""
    return _set_status(session, admin, user_id, UserStatus.inactive)


@router.post(
    "/{user_id}/unblock",
    response_model=UserRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.BAD_REQUEST},
)
async def unblock_user(user_id: uuid.UUID, admin: AdminUserDep, session: SessionDep):
    """Unblock a user. Admin only."""
    return _set_status(session, admin, user_id, UserStatus.active)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.BAD_REQUEST},
)
async def delete_user(user_id: uuid.UUID, admin: AdminUserDep, session: SessionDep):
    """Delete a user. Admin only.

    Sites, plugins and teams the user owned stay behind; the platform tools
    orphan scan finds them.
    """
    user = _get_user(session, user_id)
    if user.id == admin.id:
        raise SelfModificationError()
    log_activity(
        session,
        user_email=admin.email,
        action=f"Deleted user: {user.email}",
        entity_type=EntityType.user,
        entity_id=user.id,
    )
    session.delete(user)
    commit_or_rollback(session, "delete user")
