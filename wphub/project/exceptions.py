"""Project domain exceptions."""

from wphub.core.exceptions import NotFoundError, PermissionDeniedError


class ProjectNotFoundError(NotFoundError):
    error_type = "project_not_found"

    def __init__(self, message: str = "Project not found"):
        super().__init__(message)


class TemplateNotFoundError(NotFoundError):
    error_type = "template_not_found"

    def __init__(self, message: str = "Project template not found"):
        super().__init__(message)


class ProjectPermissionError(PermissionDeniedError):
    error_type = "project_permission_denied"

    def __init__(self, message: str = "You do not have permission for this project"):
        super().__init__(message)
