"""Team domain exceptions."""

from wphub.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)


class TeamNotFoundError(NotFoundError):
    error_type = "team_not_found"

    def __init__(self, message: str = "Team not found"):
        super().__init__(message)


class InviteNotFoundError(NotFoundError):
    error_type = "invite_not_found"

    def __init__(self, message: str = "Invite not found"):
        super().__init__(message)


class InviteNotPendingError(ConflictError):
    """Raised when an accepted or declined invite is answered again."""

    error_type = "invite_not_pending"

    def __init__(self, message: str = "Invite has already been answered"):
        super().__init__(message)


class InviteExistsError(ConflictError):
    error_type = "invite_exists"

    def __init__(self, message: str = "A pending invite already exists for this email"):
        super().__init__(message)


class AlreadyMemberError(ConflictError):
    error_type = "already_member"

    def __init__(self, message: str = "User is already a member of this team"):
        super().__init__(message)


class TeamPermissionError(PermissionDeniedError):
    error_type = "team_permission_denied"

    def __init__(self, message: str = "You do not have permission for this team"):
        super().__init__(message)


class TeamBlockedError(PermissionDeniedError):
    error_type = "team_blocked"

    def __init__(self, message: str = "This team has been blocked"):
        super().__init__(message)


class OwnerRemovalError(BadRequestError):
    error_type = "owner_removal"

    def __init__(self, message: str = "The team owner cannot be removed"):
        super().__init__(message)
