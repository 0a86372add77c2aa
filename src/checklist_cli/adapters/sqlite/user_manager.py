"""Local user profile management for the SQLite store.

The local store is single-user; every row is still owned by a ``users`` row so
the schema lines up with the hosted, multi-user store.
"""

from __future__ import annotations

import sqlite3
import uuid
from datetime import UTC, datetime

LOCAL_USER_EMAIL = "local@checklist.local"


def create_default_user(connection: sqlite3.Connection) -> str:
    """Create default local user profile.

    Returns:
        User ID (UUID string)
    """
    user_id = str(uuid.uuid4())
    now = datetime.now(UTC).isoformat()

    connection.execute(
        """
        INSERT INTO users (id, email, name, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (user_id, LOCAL_USER_EMAIL, "Local User", now, now),
    )
    connection.commit()

    return user_id


def get_or_create_local_user(connection: sqlite3.Connection) -> str:
    """Get existing local user or create one if it doesn't exist.

    Returns:
        User ID (UUID string)
    """
    cursor = connection.execute("SELECT id FROM users LIMIT 1")
    row = cursor.fetchone()

    if row:
        return row[0]

    return create_default_user(connection)

