"""Site domain exceptions."""

from wphub.core.exceptions import NotFoundError, PermissionDeniedError


class SiteNotFoundError(NotFoundError):
    error_type = "site_not_found"

    def __init__(self, message: str = "Site not found"):
        super().__init__(message)


class SitePermissionError(PermissionDeniedError):
    error_type = "site_permission_denied"

    def __init__(self, message: str = "You do not have permission to manage this site"):
        super().__init__(message)
