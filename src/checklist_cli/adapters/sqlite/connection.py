"""Database connection management for the local SQLite store.

This module provides a singleton connection manager for the local SQLite database,
ensuring proper connection lifecycle, WAL mode, and foreign key enforcement.
"""

from __future__ import annotations

import atexit
import os
import sqlite3
from pathlib import Path

from platformdirs import user_data_dir

from checklist_cli.adapters.sqlite.migrations import ALL_MIGRATIONS, MigrationRunner
from checklist_cli.utils.logger import get_logger

logger = get_logger(__name__)

IN_MEMORY = ":memory:"


def default_db_path() -> Path:
    """Default location of the local store."""
    return Path(user_data_dir("checklist_cli")) / "checklist.db"


class DatabaseConnection:
    """Singleton connection manager for the local SQLite store.

    Provides:
    - Single connection per process (connection reuse)
    - WAL mode for file databases
    - Foreign key constraint enforcement
    - Automatic directory creation
    - Owner-only file permissions
    """

    _instance: DatabaseConnection | None = None
    _connection: sqlite3.Connection | None = None
    _db_path: str | None = None
    _atexit_registered: bool = False

    def __new__(cls) -> DatabaseConnection:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Get or create database connection.

        Args:
            db_path: Path to database file, ``":memory:"``, or None for the
                default location.
        """
        instance = cls()

        if db_path is None:
            db_path = default_db_path()
        path_key = str(db_path)

        if instance._connection is not None and instance._db_path == path_key:
            return instance._connection

        if instance._connection is not None:
            instance._connection.close()

        connection = open_connection(path_key)

        instance._connection = connection
        instance._db_path = path_key

        if not cls._atexit_registered:
            atexit.register(cls.close_connection)
            cls._atexit_registered = True

        return connection

    @classmethod
    def close_connection(cls) -> None:
        """Close database connection, committing pending work."""
        instance = cls()
        if instance._connection is not None:
            try:
                instance._connection.commit()
                instance._connection.close()
            except sqlite3.Error as e:
                logger.warning("Error closing database: %s", e)
            finally:
                instance._connection = None
                instance._db_path = None


def open_connection(db_path: str) -> sqlite3.Connection:
    """Open and migrate a standalone connection (no singleton bookkeeping)."""
    is_memory = db_path == IN_MEMORY
    is_new_database = False

    if not is_memory:
        path = Path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        is_new_database = not path.exists()

    connection = sqlite3.connect(
        db_path,
        check_same_thread=False,
        timeout=30.0,
    )
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")
    if not is_memory:
        connection.execute("PRAGMA journal_mode = WAL")

    if is_new_database:
        os.chmod(db_path, 0o600)

    applied = MigrationRunner(connection).run_migrations(ALL_MIGRATIONS)
    if applied:
        logger.info("Database %s migrated (%d migrations)", db_path, applied)

    return connection


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Helper function to get the shared database connection."""
    return DatabaseConnection.get_connection(db_path)
