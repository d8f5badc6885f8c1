"""Plugin domain exceptions."""

from wphub.core.exceptions import (
    BadRequestError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    PermissionDeniedError,
)


class PluginNotFoundError(NotFoundError):
    error_type = "plugin_not_found"

    def __init__(self, message: str = "Plugin not found"):
        super().__init__(message)


class PluginExistsError(ConflictError):
    error_type = "plugin_exists"

    def __init__(self, name: str):
        super().__init__(f"Plugin {name} already exists in your library")


class PluginPermissionError(PermissionDeniedError):
    error_type = "plugin_permission_denied"

    def __init__(self, message: str = "You do not have permission for this plugin"):
        super().__init__(message)


class VersionNotFoundError(NotFoundError):
    error_type = "version_not_found"

    def __init__(self, version: str):
        super().__init__(f"Version {version} not found")


class NoInstallableVersionError(BadRequestError):
    error_type = "no_installable_version"

    def __init__(self, message: str = "Plugin has no version with a download URL"):
        super().__init__(message)


class InvalidPluginArchiveError(BadRequestError):
    error_type = "invalid_plugin_archive"

    def __init__(self, message: str = "No plugin header found in archive"):
        super().__init__(message)


class WordPressApiError(ExternalServiceError):
    error_type = "wordpress_api_error"

    def __init__(self, message: str = "wordpress.org plugin API request failed"):
        super().__init__(message)
