"""User domain exceptions.

User-related exceptions for not found, inactive, and conflict scenarios.
"""

from wphub.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)


class UserNotFoundError(NotFoundError):
    """Raised when user cannot be found."""

    error_type = "user_not_found"

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class UserInactiveError(PermissionDeniedError):
    """Raised when a blocked user tries to use the API."""

    error_type = "user_inactive"

    def __init__(self, message: str = "User is inactive"):
        super().__init__(message)


class EmailExistsError(ConflictError):
    """Raised when attempting to register with an existing email."""

    error_type = "email_exists"

    def __init__(self, message: str = "Email already registered"):
        super().__init__(message)


class SelfModificationError(BadRequestError):
    """Raised when an admin tries to block, demote or delete themselves."""

    error_type = "self_modification"

    def __init__(self, message: str = "You cannot do this to your own account"):
        super().__init__(message)
