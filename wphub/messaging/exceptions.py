"""Messaging domain exceptions."""

from wphub.core.exceptions import BadRequestError, NotFoundError, PermissionDeniedError


class MessageNotFoundError(NotFoundError):
    error_type = "message_not_found"

    def __init__(self, message: str = "Message not found"):
        super().__init__(message)


class NotificationNotFoundError(NotFoundError):
    error_type = "notification_not_found"

    def __init__(self, message: str = "Notification not found"):
        super().__init__(message)


class RecipientNotAllowedError(PermissionDeniedError):
    error_type = "recipient_not_allowed"

    def __init__(self, message: str = "You cannot send to this recipient"):
        super().__init__(message)


class InvalidRecipientError(BadRequestError):
    error_type = "invalid_recipient"

    def __init__(self, message: str = "Invalid recipient"):
        super().__init__(message)


class NoRecipientsError(BadRequestError):
    error_type = "no_recipients"

    def __init__(self, message: str = "The message has no recipients"):
        super().__init__(message)
