"""Connector domain exceptions."""

from wphub.core.exceptions import ExternalServiceError


class ConnectorError(ExternalServiceError):
    """Raised when a managed site's connector fails or cannot be reached."""

    error_type = "connector_error"

    def __init__(self, message: str = "Connector request failed"):
        super().__init__(message)


class ConnectorAuthError(ConnectorError):
    """Raised when the connector rejects the site's API key."""

    error_type = "connector_auth_error"

    def __init__(self, message: str = "Connector rejected the site API key"):
        super().__init__(message)
