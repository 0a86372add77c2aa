"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem state: config and
data directories are redirected into ``tmp_path`` and SQLite tests run on
in-memory databases with the real migrated schema.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from unittest.mock import patch
from uuid import uuid4

import pytest

from checklist_cli.adapters.sqlite.category_repository import SqliteCategoryRepository
from checklist_cli.adapters.sqlite.connection import DatabaseConnection, open_connection
from checklist_cli.adapters.sqlite.task_repository import SqliteTaskRepository
from checklist_cli.models import Category, Recurrence, RecurrencePattern, Task
from checklist_cli.utils.clock import FixedClock


# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_cache so each test gets a fresh service instance, and
    drops the shared SQLite connection afterwards.
    """
    from checklist_cli.services.config_service import ConfigService, get_config_service

    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    with patch("checklist_cli.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("checklist_cli.services.config_service.user_data_dir", return_value=tmpdir):
            yield ConfigService()
    get_config_service.cache_clear()
    DatabaseConnection.close_connection()


# ---------------------------------------------------------------------------
# SQLite
# ---------------------------------------------------------------------------


@pytest.fixture()
def db_connection():
    """Fresh in-memory database with every migration applied."""
    connection = open_connection(":memory:")
    yield connection
    connection.close()


@pytest.fixture()
def task_repo(db_connection):
    return SqliteTaskRepository(connection=db_connection)


@pytest.fixture()
def category_repo(db_connection):
    return SqliteCategoryRepository(connection=db_connection)


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock():
    """Wednesday 2024-01-10 09:00 UTC."""
    return FixedClock(datetime(2024, 1, 10, 9, 0, tzinfo=UTC))


# ---------------------------------------------------------------------------
# Model factories
# ---------------------------------------------------------------------------


def make_task(
    task_id: str | None = None,
    *,
    title: str = "Task",
    category_id: str | None = None,
    sort_order: int = 0,
    created_at: datetime | None = None,
    completed_at: datetime | None = None,
    due_date: date | None = None,
    due_time: time | None = None,
    pattern: RecurrencePattern = RecurrencePattern.NONE,
    weekly_day: int | None = None,
) -> Task:
    """Build a Task without touching a store."""
    task_id = task_id or str(uuid4())
    recurrence = None
    if pattern != RecurrencePattern.NONE:
        recurrence = Recurrence(task_id=task_id, pattern=pattern, weekly_day=weekly_day)
    return Task(
        id=task_id,
        title=title,
        category_id=category_id,
        sort_order=sort_order,
        created_at=created_at or datetime(2024, 1, 1, tzinfo=UTC),
        completed_at=completed_at,
        due_date=due_date,
        due_time=due_time,
        recurrence=recurrence,
    )


def make_category(category_id: str, name: str | None = None) -> Category:
    return Category(id=category_id, name=name or category_id.title())


@pytest.fixture()
def task_factory():
    return make_task
