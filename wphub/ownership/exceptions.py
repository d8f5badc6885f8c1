"""Ownership domain exceptions."""

from wphub.core.exceptions import NotFoundError


class OwnerNotFoundError(NotFoundError):
    """Raised when a transfer names a user or team that does not exist."""

    error_type = "owner_not_found"

    def __init__(self, owner: str):
        super().__init__(f"Owner {owner} does not exist")
