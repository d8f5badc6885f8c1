"""Auth domain router.

Registration, login, logout and password reset. Handlers stay thin and
delegate provider communication to FirebaseAuthService.
"""

import logging

from fastapi import APIRouter, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from wphub.auth.dependencies import (
    SESSION_COOKIE_NAME,
    CurrentUserDep,
    FirebaseAuthDep,
)
from wphub.auth.exceptions import InvalidCredentialsError, SessionCookieError
from wphub.auth.schemas import (
    AuthRegister,
    ConfirmPasswordResetRequest,
    EmailPasswordLoginRequest,
    PasswordResetRequest,
)
from wphub.core.constants import CommonResponses, Routes
from wphub.core.deps import SessionDep, SettingsDep
from wphub.core.email import send_password_reset_email
from wphub.core.exceptions import AppException, BadRequestError, InternalError
from wphub.core.schemas import MessageResponse
from wphub.db.commit import commit_or_rollback
from wphub.user.exceptions import EmailExistsError, UserInactiveError
from wphub.user.models import User, UserStatus
from wphub.user.schemas import UserPublicRead

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=Routes.AUTH.prefix,
    tags=[Routes.AUTH.tag],
    responses={**CommonResponses.BAD_REQUEST},
)


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT},
)
async def register(
    register_data: AuthRegister,
    session: SessionDep,
    firebase_auth: FirebaseAuthDep,
):
    """Register a new user.

    Creates the Firebase account and the local user in one step; the
    Firebase account is removed again if the local insert fails.
    """
    email_exists = session.exec(
        select(User).where(User.email == register_data.email)
    ).first()
    if email_exists:
        raise EmailExistsError()

    firebase_user = firebase_auth.create_user(
        email=register_data.email,
        password=register_data.password,
    )

    user = User(
        external_id=firebase_user.uid,
        email=register_data.email,
        full_name=register_data.full_name,
        company=register_data.company,
        status=UserStatus.active,
        created_by=register_data.email,
    )
    try:
        session.add(user)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        firebase_auth.delete_user(firebase_user.uid)
        raise InternalError("Failed to create user") from e

    logger.info("Registered user %s", user.id, extra={"user_id": str(user.id)})
    return MessageResponse(message="User registered successfully")


@router.post(
    "/login",
    response_model=UserPublicRead,
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)
async def login(
    payload: EmailPasswordLoginRequest,
    response: Response,
    session: SessionDep,
    firebase_auth: FirebaseAuthDep,
    settings: SettingsDep,
):
    """Login with email/password and set the Firebase session cookie.

    Accounts created directly in Firebase get a local user on first login.
    """
    firebase_user = await firebase_auth.sign_in_with_email_password(
        email=payload.email,
        password=payload.password,
    )
    session_cookie = firebase_auth.create_session_cookie(
        firebase_user.id_token,
        expires_in=settings.session_expires_in,
    )

    user = session.exec(
        select(User).where(User.external_id == firebase_user.uid)
    ).first()

    if user is None:
        if not firebase_user.email:
            raise BadRequestError("Email not found in Firebase token")
        user = User(
            external_id=firebase_user.uid,
            email=firebase_user.email,
            created_by=firebase_user.email,
        )
        session.add(user)
        session.commit()
        session.refresh(user)

    if user.status == UserStatus.inactive:
        raise UserInactiveError()

    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_cookie,
        max_age=int(settings.session_expires_in.total_seconds()),
        httponly=True,
        secure=settings.is_secure_cookie,
        samesite="lax",
    )
    return user


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def logout(
    request: Request,
    response: Response,
    session: SessionDep,
    firebase_auth: FirebaseAuthDep,
):
    """Clear the session cookie, revoke refresh tokens and reset the 2FA session.

    A user with two-factor auth enabled must verify again on next login.
    """
    session_cookie = request.cookies.get(SESSION_COOKIE_NAME)
    if not session_cookie:
        raise InvalidCredentialsError("Not authenticated")

    response.delete_cookie(key=SESSION_COOKIE_NAME)

    try:
        claims = firebase_auth.verify_session_cookie(
            session_cookie, check_revoked=False
        )
    except SessionCookieError:
        return MessageResponse(message="Logout successful")

    firebase_auth.revoke_refresh_tokens(claims.uid)

    user = session.exec(select(User).where(User.external_id == claims.uid)).first()
    if user is not None and user.two_fa_enabled and user.two_fa_verified_session:
        user.two_fa_verified_session = False
        session.add(user)
        commit_or_rollback(session, "reset 2FA session")

    return MessageResponse(message="Logout successful")


@router.get(
    "/me",
    response_model=UserPublicRead,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def get_me(user: CurrentUserDep):
    """Get current authenticated user."""
    return user


@router.post("/request-password-reset", response_model=MessageResponse)
async def request_password_reset(
    request: PasswordResetRequest,
    firebase_auth: FirebaseAuthDep,
):
    """Email a password reset link.

    Always returns success to prevent email enumeration.
    """
    try:
        reset_link = await firebase_auth.generate_password_reset_link(request.email)
        send_password_reset_email(request.email, reset_link)
    except AppException as e:
        logger.info("Password reset request not sent: %s", e.error_type)
    except Exception:
        logger.exception("Password reset email delivery failed")

    return MessageResponse(
        message="If an account with that email exists, a password reset link has been sent"  # noqa: E501
    )


@router.post("/confirm-password-reset", response_model=MessageResponse)
async def confirm_password_reset(
    request: ConfirmPasswordResetRequest,
    firebase_auth: FirebaseAuthDep,
):
    """Set a new password using the oobCode from the reset email."""
    await firebase_auth.confirm_password_reset(
        oob_code=request.oob_code,
        new_password=request.new_password,
    )
    return MessageResponse(message="Password has been reset successfully")
