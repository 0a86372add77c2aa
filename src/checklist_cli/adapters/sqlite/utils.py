"""Utility functions for SQLite adapter."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, time
from typing import Any


def generate_uuid() -> str:
    """Generate a new UUID as string.

    Returns:
        UUID string (e.g., "123e4567-e89b-12d3-a456-426614174000")
    """
    return str(uuid.uuid4())


def now_iso() -> str:
    """Get current timestamp in ISO format.

    Returns:
        ISO format datetime string
    """
    return datetime.now(UTC).isoformat()


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary.

    Args:
        row: sqlite3.Row object

    Returns:
        Dictionary with column names as keys
    """
    if row is None:
        return {}
    return dict(row)


def to_db_value(value: Any) -> Any:
    """Convert a model value into something sqlite3 stores as text/number."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if hasattr(value, "value"):  # enums
        return value.value
    return value


def build_update_clause(updates: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build SQL UPDATE SET clause from updates dictionary.

    None values are written as NULL; callers pass only the fields they mean
    to change.

    Args:
        updates: Dictionary of field names to new values

    Returns:
        Tuple of (SET clause string, parameters list)
    """
    set_parts = []
    params = []

    for key, value in updates.items():
        set_parts.append(f"{key} = ?")
        params.append(to_db_value(value))

    set_clause = ", ".join(set_parts)
    return set_clause, params


def placeholders(count: int) -> str:
    """``?, ?, ?`` for an IN clause of *count* items."""
    return ", ".join("?" for _ in range(count))
