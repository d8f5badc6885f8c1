"""Tests for auth domain router."""

from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from wphub.auth.exceptions import InvalidCredentialsError, SessionCookieError
from wphub.auth.service import FirebaseUser, TokenClaims
from wphub.user.exceptions import UserNotFoundError
from wphub.user.models import User

# --- POST /auth/register ---


def test_register_new_user(
    unauthenticated_client: TestClient, mock_firebase_auth: MagicMock, session: Session
):
    mock_firebase_auth.create_user.return_value = FirebaseUser(
        uid="new-uid", email="new@example.com"
    )

    response = unauthenticated_client.post(
        "/auth/register",
        json={
            "email": "new@example.com",
            "password": "securepassword123",
            "full_name": "New User",
            "company": "Agency Ltd",
        },
    )

    assert response.status_code == 201
    assert response.json()["message"] == "User registered successfully"
    user = session.exec(select(User).where(User.email == "new@example.com")).one()
    assert user.external_id == "new-uid"
    assert user.full_name == "New User"
    assert user.company == "Agency Ltd"


def test_register_duplicate_email_local(
    unauthenticated_client: TestClient, mock_firebase_auth: MagicMock, test_user: User
):
    response = unauthenticated_client.post(
        "/auth/register",
        json={
            "email": test_user.email,
            "password": "securepassword123",
            "full_name": "Someone",
        },
    )

    assert response.status_code == 409
    mock_firebase_auth.create_user.assert_not_called()


def test_register_requires_full_name(
    unauthenticated_client: TestClient, mock_firebase_auth: MagicMock
):
    response = unauthenticated_client.post(
        "/auth/register",
        json={"email": "new@example.com", "password": "securepassword123", "full_name": ""},
    )

    assert response.status_code == 422
    assert response.json()["type"] == "validation_error"
    mock_firebase_auth.create_user.assert_not_called()


# --- POST /auth/login ---


def test_login_existing_user(
    unauthenticated_client: TestClient, mock_firebase_auth: MagicMock, test_user: User
):
    mock_firebase_auth.sign_in_with_email_password = AsyncMock(
        return_value=FirebaseUser(
            uid=test_user.external_id, email=test_user.email, id_token="id-token"
        )
    )
    mock_firebase_auth.create_session_cookie.return_value = "session-cookie"

    response = unauthenticated_client.post(
        "/auth/login", json={"email": test_user.email, "password": "secret123"}
    )

    assert response.status_code == 200
    assert response.json()["id"] == str(test_user.id)
    assert "external_id" not in response.json()
    assert response.cookies.get("session") == "session-cookie"


def test_login_creates_local_user_on_first_sign_in(
    unauthenticated_client: TestClient, mock_firebase_auth: MagicMock, session: Session
):
    mock_firebase_auth.sign_in_with_email_password = AsyncMock(
        return_value=FirebaseUser(uid="fresh-uid", email="fresh@example.com", id_token="t")
    )
    mock_firebase_auth.create_session_cookie.return_value = "session-cookie"

    response = unauthenticated_client.post(
        "/auth/login", json={"email": "fresh@example.com", "password": "secret123"}
    )

    assert response.status_code == 200
    user = session.exec(select(User).where(User.external_id == "fresh-uid")).one()
    assert user.email == "fresh@example.com"


def test_login_blocked_user(
    unauthenticated_client: TestClient,
    mock_firebase_auth: MagicMock,
    inactive_user: User,
):
    mock_firebase_auth.sign_in_with_email_password = AsyncMock(
        return_value=FirebaseUser(
            uid=inactive_user.external_id, email=inactive_user.email, id_token="t"
        )
    )
    mock_firebase_auth.create_session_cookie.return_value = "session-cookie"

    response = unauthenticated_client.post(
        "/auth/login", json={"email": inactive_user.email, "password": "secret123"}
    )

    assert response.status_code == 403
    assert "session" not in response.cookies


def test_login_invalid_credentials(
    unauthenticated_client: TestClient, mock_firebase_auth: MagicMock
):
    mock_firebase_auth.sign_in_with_email_password = AsyncMock(
        side_effect=InvalidCredentialsError()
    )

    response = unauthenticated_client.post(
        "/auth/login", json={"email": "a@example.com", "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json() == {
        "type": "invalid_credentials",
        "message": "Invalid email or password",
    }


# --- POST /auth/logout ---


def test_logout_resets_two_factor_session(
    unauthenticated_client: TestClient,
    mock_firebase_auth: MagicMock,
    test_user: User,
    session: Session,
):
    test_user.two_fa_enabled = True
    test_user.two_fa_verified_session = True
    session.add(test_user)
    session.commit()
    mock_firebase_auth.verify_session_cookie.return_value = TokenClaims(
        uid=test_user.external_id
    )

    unauthenticated_client.cookies.set("session", "session-cookie")
    response = unauthenticated_client.post("/auth/logout")

    assert response.status_code == 200
    mock_firebase_auth.revoke_refresh_tokens.assert_called_once_with(
        test_user.external_id
    )
    session.refresh(test_user)
    assert test_user.two_fa_verified_session is False


def test_logout_reports_failed_session_reset(
    unauthenticated_client: TestClient,
    mock_firebase_auth: MagicMock,
    test_user: User,
    session: Session,
):
    test_user.two_fa_enabled = True
    test_user.two_fa_verified_session = True
    session.add(test_user)
    session.commit()
    mock_firebase_auth.verify_session_cookie.return_value = TokenClaims(
        uid=test_user.external_id
    )

    unauthenticated_client.cookies.set("session", "session-cookie")
    with patch.object(
        session, "commit", side_effect=OperationalError("UPDATE", {}, Exception())
    ):
        response = unauthenticated_client.post("/auth/logout")

    assert response.status_code == 500
    assert response.json() == {
        "type": "internal_error",
        "message": "Failed to reset 2FA session",
    }
    session.refresh(test_user)
    assert test_user.two_fa_verified_session is True


def test_logout_with_stale_cookie(
    unauthenticated_client: TestClient, mock_firebase_auth: MagicMock
):
    mock_firebase_auth.verify_session_cookie.side_effect = SessionCookieError()

    unauthenticated_client.cookies.set("session", "stale")
    response = unauthenticated_client.post("/auth/logout")

    assert response.status_code == 200
    mock_firebase_auth.revoke_refresh_tokens.assert_not_called()


def test_logout_without_cookie(unauthenticated_client: TestClient):
    response = unauthenticated_client.post("/auth/logout")

    assert response.status_code == 401


# --- GET /auth/me ---


def test_auth_me(client: TestClient, test_user: User):
    response = client.get("/auth/me")

    assert response.status_code == 200
    assert response.json()["email"] == test_user.email


def test_auth_me_unauthenticated(unauthenticated_client: TestClient):
    response = unauthenticated_client.get("/auth/me")

    assert response.status_code == 401


# --- Password reset ---


def test_request_password_reset_sends_email(
    unauthenticated_client: TestClient, mock_firebase_auth: MagicMock
):
    mock_firebase_auth.generate_password_reset_link = AsyncMock(
        return_value="https://x.firebaseapp.com/__/auth/action?oobCode=CODE"
    )

    with patch("wphub.auth.router.send_password_reset_email") as mock_send:
        response = unauthenticated_client.post(
            "/auth/request-password-reset", json={"email": "test@example.com"}
        )

    assert response.status_code == 200
    mock_send.assert_called_once_with(
        "test@example.com", "https://x.firebaseapp.com/__/auth/action?oobCode=CODE"
    )


def test_request_password_reset_hides_unknown_email(
    unauthenticated_client: TestClient, mock_firebase_auth: MagicMock
):
    mock_firebase_auth.generate_password_reset_link = AsyncMock(
        side_effect=UserNotFoundError()
    )

    with patch("wphub.auth.router.send_password_reset_email") as mock_send:
        response = unauthenticated_client.post(
            "/auth/request-password-reset", json={"email": "nobody@example.com"}
        )

    assert response.status_code == 200
    mock_send.assert_not_called()


def test_confirm_password_reset(
    unauthenticated_client: TestClient, mock_firebase_auth: MagicMock
):
    mock_firebase_auth.confirm_password_reset = AsyncMock(return_value=None)

    response = unauthenticated_client.post(
        "/auth/confirm-password-reset",
        json={"oob_code": "CODE", "new_password": "brand-new-pass"},
    )

    assert response.status_code == 200
    mock_firebase_auth.confirm_password_reset.assert_awaited_once_with(
        oob_code="CODE", new_password="brand-new-pass"
    )
