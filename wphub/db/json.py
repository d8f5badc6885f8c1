"""Helpers for querying JSON list columns portably (SQLite and PostgreSQL)."""

from typing import Any

from sqlalchemy import String, cast
from sqlalchemy.sql.elements import ColumnElement


def json_text_contains(column: Any, value: str) -> ColumnElement[bool]:
    """Match rows whose serialized JSON mentions ``value``.

    This is a coarse prefilter that narrows the scan in SQL; callers must
    still check the decoded value exactly.
    """
    return cast(column, String).contains(value)
