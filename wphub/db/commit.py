"""Unit-of-work helper for service workflows."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from wphub.core.exceptions import InternalError

logger = logging.getLogger(__name__)


def commit_or_rollback(session: Session, what: str) -> None:
    """Commit everything staged in ``session`` or nothing.

    ``what`` names the workflow in the log line and in the 500 message.
    """
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Failed to %s", what)
        raise InternalError(f"Failed to {what}") from e
