"""Typed payloads for the Google Identity Toolkit REST endpoints in use.

https://cloud.google.com/identity-platform/docs/reference/rest/v1/accounts
"""

from typing import Literal, NotRequired, TypedDict

IDENTITY_TOOLKIT_ENDPOINTS: dict[str, str] = {
    "signInWithPassword": "v1/accounts:signInWithPassword",
    "sendOobCode": "v1/accounts:sendOobCode",
    "resetPassword": "v1/accounts:resetPassword",
}


class SignInWithPasswordRequest(TypedDict):
    email: str
    password: str
    returnSecureToken: bool


class SignInWithPasswordResponse(TypedDict, total=False):
    kind: str
    localId: str  # Firebase UID
    email: str
    displayName: str
    idToken: str
    registered: bool
    refreshToken: str
    expiresIn: str  # seconds


class SendOobCodeRequest(TypedDict):
    requestType: Literal["PASSWORD_RESET"]
    email: str
    returnOobLink: NotRequired[bool]


class SendOobCodeResponse(TypedDict, total=False):
    oobCode: str
    email: str
    oobLink: str


class ResetPasswordRequest(TypedDict):
    oobCode: str
    newPassword: str


class ResetPasswordResponse(TypedDict, total=False):
    kind: str
    email: str
    requestType: str
