"""Tests for resolving the signed-in user from cookies and bearer tokens."""

from unittest.mock import MagicMock

import pytest
from sqlmodel import Session

from wphub.auth.dependencies import (
    SESSION_COOKIE_NAME,
    get_admin_user,
    get_current_user,
)
from wphub.auth.exceptions import (
    AdminRequiredError,
    InvalidCredentialsError,
    InvalidTokenError,
    SessionCookieError,
)
from wphub.auth.service import FirebaseAuthService, TokenClaims
from wphub.core.exceptions import AppException
from wphub.user.exceptions import UserInactiveError, UserNotFoundError
from wphub.user.models import User


@pytest.fixture(name="firebase")
def firebase_fixture() -> MagicMock:
    return MagicMock(spec=FirebaseAuthService)


def _request(cookie: str | None = None) -> MagicMock:
    request = MagicMock()
    request.cookies = {SESSION_COOKIE_NAME: cookie} if cookie else {}
    return request


def _bearer(token: str) -> MagicMock:
    credentials = MagicMock()
    credentials.credentials = token
    return credentials


def test_bearer_token_resolves_local_user(
    session: Session, test_user: User, firebase: MagicMock
):
    firebase.verify_id_token.return_value = TokenClaims(uid=test_user.external_id)

    user = get_current_user(_request(), session, firebase, _bearer("id-token"))

    assert user.id == test_user.id
    firebase.verify_id_token.assert_called_once_with("id-token")


def test_session_cookie_checks_revocation(
    session: Session, test_user: User, firebase: MagicMock
):
    firebase.verify_session_cookie.return_value = TokenClaims(uid=test_user.external_id)

    user = get_current_user(_request("cookie"), session, firebase, None)

    assert user.id == test_user.id
    firebase.verify_session_cookie.assert_called_once_with("cookie", check_revoked=True)


def test_session_cookie_wins_over_bearer(
    session: Session, test_user: User, firebase: MagicMock
):
    firebase.verify_session_cookie.return_value = TokenClaims(uid=test_user.external_id)

    get_current_user(_request("cookie"), session, firebase, _bearer("id-token"))

    firebase.verify_id_token.assert_not_called()


def test_rejected_cookie_is_invalid_token(session: Session, firebase: MagicMock):
    firebase.verify_session_cookie.side_effect = SessionCookieError("revoked")

    with pytest.raises(InvalidTokenError) as exc_info:
        get_current_user(_request("cookie"), session, firebase, None)

    assert exc_info.value.status_code == 401


def test_rejected_bearer_is_invalid_token(session: Session, firebase: MagicMock):
    firebase.verify_id_token.side_effect = AppException("expired")

    with pytest.raises(InvalidTokenError):
        get_current_user(_request(), session, firebase, _bearer("id-token"))


def test_no_credentials(session: Session, firebase: MagicMock):
    with pytest.raises(InvalidCredentialsError) as exc_info:
        get_current_user(_request(), session, firebase, None)

    assert exc_info.value.message == "Not authenticated"


def test_unknown_firebase_uid(session: Session, firebase: MagicMock):
    firebase.verify_id_token.return_value = TokenClaims(uid="uid-nobody")

    with pytest.raises(UserNotFoundError):
        get_current_user(_request(), session, firebase, _bearer("id-token"))


def test_blocked_user_is_refused(
    session: Session, inactive_user: User, firebase: MagicMock
):
    firebase.verify_id_token.return_value = TokenClaims(uid=inactive_user.external_id)

    with pytest.raises(UserInactiveError) as exc_info:
        get_current_user(_request(), session, firebase, _bearer("id-token"))

    assert exc_info.value.status_code == 403


def test_admin_guard(test_user: User, admin_user: User):
    assert get_admin_user(admin_user) is admin_user
    with pytest.raises(AdminRequiredError) as exc_info:
        get_admin_user(test_user)
    assert exc_info.value.status_code == 403
