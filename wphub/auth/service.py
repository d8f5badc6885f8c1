"""Firebase Authentication Service.

Wraps the Firebase Admin SDK (session cookies, token verification, account
management) and the Identity Toolkit REST API (password sign-in and password
reset), translating provider errors into the hub's exception hierarchy.
"""

import contextlib
import logging
import re
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Any

import firebase_admin
import httpx
from firebase_admin import auth as firebase_admin_auth
from firebase_admin.exceptions import FirebaseError

from wphub.auth.exceptions import (
    InvalidCredentialsError,
    PasswordPolicyError,
    PasswordResetError,
    SessionCookieError,
    UserDisabledError,
    WeakPasswordError,
)
from wphub.auth.identity_toolkit import (
    IDENTITY_TOOLKIT_ENDPOINTS,
    SendOobCodeResponse,
    SignInWithPasswordResponse,
)
from wphub.core.exceptions import AppException, ProviderError, RateLimitError
from wphub.core.http import get_firebase_client
from wphub.core.retry import with_retry
from wphub.core.settings import get_settings
from wphub.user.exceptions import EmailExistsError, UserNotFoundError

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS_MESSAGES = {
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
}

_SESSION_EXPIRED = InvalidCredentialsError("Session expired, please login again")

# Identity Toolkit error codes (substring match) -> exception to raise.
_IDENTITY_TOOLKIT_ERRORS: tuple[tuple[str, AppException], ...] = (
    ("USER_DISABLED", UserDisabledError()),
    ("WEAK_PASSWORD", WeakPasswordError()),
    ("EMAIL_EXISTS", EmailExistsError("Email already in use")),
    ("TOKEN_EXPIRED", _SESSION_EXPIRED),
    ("INVALID_ID_TOKEN", _SESSION_EXPIRED),
    ("EXPIRED_OOB_CODE", PasswordResetError("Password reset link has expired")),
    ("INVALID_OOB_CODE", PasswordResetError("Invalid password reset link")),
)


@dataclass(frozen=True)
class FirebaseUser:
    """Represents authenticated Firebase user data."""

    uid: str
    email: str | None = None
    id_token: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """Decoded token claims from Firebase."""

    uid: str
    email: str | None = None


class FirebaseAuthService:
    """Firebase Authentication Service implementation."""

    def __init__(
        self,
        api_key: str | None,
        identity_toolkit_base_url: str = "https://identitytoolkit.googleapis.com",
    ):
        self._api_key = api_key
        self._identity_toolkit_base_url = identity_toolkit_base_url

    def _ensure_api_key(self) -> str:
        if not self._api_key:
            raise AppException("Firebase API key not configured")
        return self._api_key

    async def _post(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        retry: bool = False,
    ) -> dict[str, Any]:
        """POST to Identity Toolkit and return the JSON body.

        Transport errors are retried once when ``retry`` is set; HTTP errors
        are mapped by ``_handle_identity_toolkit_error``.
        """
        client = get_firebase_client()

        async def do_request() -> httpx.Response:
            return await client.post(url, json=payload, headers=headers)

        try:
            response = await with_retry(
                do_request,
                attempts=2 if retry else 1,
                exceptions=(httpx.RequestError,),
            )
        except httpx.RequestError as e:
            raise ProviderError("Authentication provider unavailable") from e

        if response.status_code != 200:
            self._handle_identity_toolkit_error(response)

        return response.json()

    async def _request(
        self, endpoint: str, payload: dict[str, Any], *, retry: bool = False
    ) -> dict[str, Any]:
        """Call an Identity Toolkit endpoint authenticated by the web API key."""
        api_key = self._ensure_api_key()
        url = f"{self._identity_toolkit_base_url}/{endpoint}?key={api_key}"
        return await self._post(url, payload, retry=retry)

    async def _admin_request(
        self, endpoint: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        """Call an Identity Toolkit endpoint with service account credentials.

        Needed for ``returnOobLink``, which the web API key may not use.
        """
        try:
            credential = firebase_admin.get_app().credential
            access_token = credential.get_access_token().access_token
        except ValueError as e:
            raise AppException("Firebase Admin SDK not initialized") from e

        url = f"{self._identity_toolkit_base_url}/{endpoint}"
        return await self._post(
            url, payload, headers={"Authorization": f"Bearer {access_token}"}
        )

    @staticmethod
    def _parse_retry_after(value: str | None) -> int | None:
        if not value:
            return None
        with contextlib.suppress(ValueError):
            parsed = int(value)
            if parsed >= 0:
                return parsed
        return None

    def _rate_limit_error(self, response: httpx.Response) -> RateLimitError:
        return RateLimitError(
            "Too many attempts, try again later",
            retry_after=self._parse_retry_after(response.headers.get("Retry-After")),
        )

    @staticmethod
    def _sanitize_error_code(error_message: str) -> str:
        """Extract a safe, non-sensitive error code for logging."""
        match = re.match(r"[A-Z0-9_]+", error_message)
        return match.group(0) if match else "UNKNOWN"

    @staticmethod
    def _extract_password_requirements(error_message: str) -> list[str]:
        match = re.search(r"Missing password requirements: \[([^\]]+)\]", error_message)
        if match:
            return [req.strip() for req in match.group(1).split(",")]
        return []

    def _handle_identity_toolkit_error(self, response: httpx.Response) -> None:
        """Raise the exception matching an Identity Toolkit error response."""
        try:
            error_message = response.json().get("error", {}).get("message", "")
        except ValueError as e:
            if response.status_code == 429:
                raise self._rate_limit_error(response) from e
            raise ProviderError(
                "Authentication provider returned an invalid response"
            ) from e

        logger.info(
            "Identity Toolkit error: status=%s, code=%s",
            response.status_code,
            self._sanitize_error_code(error_message),
        )

        if response.status_code == 429 or error_message.startswith(
            "TOO_MANY_ATTEMPTS_TRY_LATER"
        ):
            raise self._rate_limit_error(response)

        if error_message in _INVALID_CREDENTIALS_MESSAGES:
            raise InvalidCredentialsError()

        if "PASSWORD_DOES_NOT_MEET_REQUIREMENTS" in error_message:
            raise PasswordPolicyError(
                requirements=self._extract_password_requirements(error_message)
            )

        for code, error in _IDENTITY_TOOLKIT_ERRORS:
            if code in error_message:
                raise type(error)(error.message)

        if response.status_code in {400, 401, 403}:
            raise InvalidCredentialsError("Authentication failed")

        raise ProviderError(f"Authentication failed: {error_message or 'unknown'}")

    async def sign_in_with_email_password(
        self, email: str, password: str
    ) -> FirebaseUser:
        """Authenticate user with email/password via Identity Toolkit.

        Raises:
            InvalidCredentialsError: If email/password invalid
            UserDisabledError: If user account is disabled
            RateLimitError: If rate limit exceeded
            ProviderError: If upstream returns unexpected response
        """
        data: SignInWithPasswordResponse = await self._request(
            IDENTITY_TOOLKIT_ENDPOINTS["signInWithPassword"],
            {"email": email, "password": password, "returnSecureToken": True},
            retry=True,
        )

        id_token = data.get("idToken")
        uid = data.get("localId")
        if not id_token or not uid:
            raise InvalidCredentialsError("Authentication failed")

        return FirebaseUser(uid=uid, email=data.get("email"), id_token=id_token)

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        try:
            return firebase_admin_auth.create_session_cookie(
                id_token, expires_in=expires_in
            )
        except (ValueError, FirebaseError) as e:
            raise SessionCookieError("Failed to create session cookie") from e

    @staticmethod
    def _extract_token_claims(
        decoded: dict[str, Any], allow_sub: bool = False
    ) -> TokenClaims:
        uid = decoded.get("uid")
        if allow_sub and not uid:
            uid = decoded.get("sub")
        if not uid:
            raise AppException("Invalid token: missing uid")
        return TokenClaims(uid=uid, email=decoded.get("email"))

    def verify_session_cookie(
        self, session_cookie: str, check_revoked: bool = True
    ) -> TokenClaims:
        """Verify session cookie and return claims.

        Raises:
            SessionCookieError: If verification fails
        """
        try:
            decoded = firebase_admin_auth.verify_session_cookie(
                session_cookie, check_revoked=check_revoked
            )
            return self._extract_token_claims(decoded, allow_sub=True)
        except (ValueError, FirebaseError) as e:
            raise SessionCookieError("Invalid session cookie") from e
        except AppException as e:
            raise SessionCookieError(e.message) from e

    def verify_id_token(self, id_token: str) -> TokenClaims:
        try:
            decoded = firebase_admin_auth.verify_id_token(id_token)
        except (ValueError, FirebaseError) as e:
            raise AppException("Invalid ID token") from e
        return self._extract_token_claims(decoded)

    def revoke_refresh_tokens(self, uid: str) -> None:
        """Revoke all refresh tokens for a user (best-effort)."""
        try:
            firebase_admin_auth.revoke_refresh_tokens(uid)
        except FirebaseError as e:
            logger.warning("Failed to revoke refresh tokens: %s", e)

    def create_user(self, email: str, password: str) -> FirebaseUser:
        """Create a new Firebase user.

        Raises:
            EmailExistsError: If email already registered
            WeakPasswordError: If password doesn't meet requirements
            PasswordPolicyError: If password doesn't meet policy requirements
        """
        try:
            record = firebase_admin_auth.create_user(email=email, password=password)
        except firebase_admin_auth.EmailAlreadyExistsError as e:
            raise EmailExistsError() from e
        except (ValueError, FirebaseError) as e:
            error_message = str(e)
            if "PASSWORD_DOES_NOT_MEET_REQUIREMENTS" in error_message:
                raise PasswordPolicyError(
                    requirements=self._extract_password_requirements(error_message)
                ) from e
            if "EMAIL_EXISTS" in error_message:
                raise EmailExistsError() from e
            if "WEAK_PASSWORD" in error_message or "password" in error_message.lower():
                raise WeakPasswordError() from e
            raise AppException("Failed to create user") from e
        return FirebaseUser(uid=record.uid, email=email)

    def delete_user(self, uid: str) -> None:
        """Delete a Firebase user (best-effort, used for rollback)."""
        try:
            firebase_admin_auth.delete_user(uid)
        except FirebaseError as e:
            logger.warning("Failed to delete Firebase user during rollback: %s", e)

    async def generate_password_reset_link(self, email: str) -> str:
        """Generate a password reset link for a user.

        Raises:
            UserNotFoundError: If email not found in Firebase
        """
        try:
            data: SendOobCodeResponse = await self._admin_request(
                IDENTITY_TOOLKIT_ENDPOINTS["sendOobCode"],
                {
                    "requestType": "PASSWORD_RESET",
                    "email": email,
                    "returnOobLink": True,
                },
            )
        except InvalidCredentialsError as e:
            # EMAIL_NOT_FOUND is reported like a bad password.
            raise UserNotFoundError() from e

        oob_link = data.get("oobLink")
        if not oob_link:
            raise ProviderError("Failed to generate password reset link")
        return oob_link

    async def confirm_password_reset(self, oob_code: str, new_password: str) -> None:
        """Confirm password reset using oobCode from email.

        Raises:
            PasswordResetError: If oobCode is expired or invalid
            WeakPasswordError: If password doesn't meet requirements
        """
        await self._request(
            IDENTITY_TOOLKIT_ENDPOINTS["resetPassword"],
            {"oobCode": oob_code, "newPassword": new_password},
        )


@lru_cache
def get_firebase_auth_service() -> FirebaseAuthService:
    """Get cached Firebase Auth Service instance."""
    settings = get_settings()
    return FirebaseAuthService(
        api_key=settings.firebase_api_key,
        identity_toolkit_base_url=settings.identity_toolkit_base_url,
    )
