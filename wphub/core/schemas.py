"""Shared response schema pieces."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, PlainSerializer


def format_utc(value: datetime) -> str:
    """Format datetime as ISO 8601 string in UTC (e.g. 2026-01-19T12:34:56Z).

    Naive values are assumed to already be UTC (see TimestampMixin).
    """
    if value.tzinfo is not None:
        utc_value = value.astimezone(UTC)
    else:
        utc_value = value.replace(tzinfo=UTC)
    return utc_value.replace(microsecond=0).isoformat().replace("+00:00", "Z")


UtcDatetime = Annotated[datetime, PlainSerializer(format_utc, return_type=str)]


class ErrorResponse(BaseModel):
    """Body of every error response."""

    type: str
    message: str


class MessageResponse(BaseModel):
    message: str
