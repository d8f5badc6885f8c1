"""Activity domain service."""

import uuid

from sqlmodel import Session, col, select

from wphub.activity.models import ActivityLog, EntityType


def log_activity(
    session: Session,
    *,
    user_email: str,
    action: str,
    entity_type: EntityType,
    entity_id: uuid.UUID | str | None = None,
    details: str | None = None,
) -> ActivityLog:
    """Stage an audit entry in the caller's unit of work.

    Nothing is committed here: the entry is persisted together with the
    mutation it describes, or not at all.
    """
    entry = ActivityLog(
        user_email=user_email,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=details,
    )
    session.add(entry)
    return entry


def recent_activity_for(
    session: Session, user_email: str, *, limit: int = 5
) -> list[ActivityLog]:
    """Latest entries by one user, without connector housekeeping noise."""
    statement = (
        select(ActivityLog)
        .where(ActivityLog.user_email == user_email)
        .where(ActivityLog.entity_type != EntityType.connector)
        .order_by(col(ActivityLog.created_at).desc())
        .limit(limit)
    )
    return list(session.exec(statement).all())


def list_activity(
    session: Session,
    *,
    entity_type: EntityType | None = None,
    entity_id: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[ActivityLog]:
    statement = select(ActivityLog)
    if entity_type is not None:
        statement = statement.where(ActivityLog.entity_type == entity_type)
    if entity_id is not None:
        statement = statement.where(ActivityLog.entity_id == entity_id)
    statement = (
        statement.order_by(col(ActivityLog.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return list(session.exec(statement).all())
