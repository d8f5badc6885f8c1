"""Auth domain dependencies.

Resolves the request's Firebase session cookie (or bearer ID token) to the
local User row. The resolved user is request-scoped and passed explicitly to
every service call.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session, select

from wphub.auth.exceptions import (
    AdminRequiredError,
    InvalidCredentialsError,
    InvalidTokenError,
    SessionCookieError,
)
from wphub.auth.service import FirebaseAuthService, get_firebase_auth_service
from wphub.core.exceptions import AppException
from wphub.db.engine import get_session
from wphub.user.exceptions import UserInactiveError, UserNotFoundError
from wphub.user.models import User

SESSION_COOKIE_NAME = "session"

security = HTTPBearer(auto_error=False)

FirebaseAuthDep = Annotated[FirebaseAuthService, Depends(get_firebase_auth_service)]


def get_current_user(
    request: Request,
    session: Annotated[Session, Depends(get_session)],
    firebase_auth: FirebaseAuthDep,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(security)
    ] = None,
) -> User:
    """Verify Firebase authentication and return local User.

    Supports two authentication methods (in priority order):
    1. Session cookie (web app)
    2. Bearer ID token (API clients)

    Raises:
        InvalidTokenError: If authentication token is invalid
        InvalidCredentialsError: If not authenticated
        UserNotFoundError: If user not found in database
        UserInactiveError: If user is blocked
    """
    external_id: str | None = None

    session_cookie = request.cookies.get(SESSION_COOKIE_NAME)
    if session_cookie:
        try:
            claims = firebase_auth.verify_session_cookie(
                session_cookie, check_revoked=True
            )
            external_id = claims.uid
        except SessionCookieError as e:
            raise InvalidTokenError() from e

    if external_id is None and credentials is not None:
        try:
            claims = firebase_auth.verify_id_token(credentials.credentials)
            external_id = claims.uid
        except AppException as e:
            raise InvalidTokenError() from e

    if not external_id:
        raise InvalidCredentialsError("Not authenticated")

    user = session.exec(select(User).where(User.external_id == external_id)).first()
    if user is None:
        raise UserNotFoundError()
    if not user.is_active:
        raise UserInactiveError()

    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_auth(_user: CurrentUserDep) -> None:
    """Router-level guard: authentication required, user not injected."""


def get_admin_user(user: CurrentUserDep) -> User:
    """Return the current user if they are a platform admin.

    Raises:
        AdminRequiredError: If user is not an admin
    """
    if not user.is_admin:
        raise AdminRequiredError()
    return user


AdminUserDep = Annotated[User, Depends(get_admin_user)]


def require_admin(_user: AdminUserDep) -> None:
    """Router-level guard: platform admin required."""
