"""SQLite adapter module - Local database storage implementation."""

from checklist_cli.adapters.sqlite.category_repository import SqliteCategoryRepository
from checklist_cli.adapters.sqlite.connection import (
    DatabaseConnection,
    get_connection,
    open_connection,
)
from checklist_cli.adapters.sqlite.task_repository import SqliteTaskRepository
from checklist_cli.adapters.sqlite.user_manager import get_or_create_local_user

__all__ = [
    "SqliteTaskRepository",
    "SqliteCategoryRepository",
    "DatabaseConnection",
    "get_connection",
    "open_connection",
    "get_or_create_local_user",
]
