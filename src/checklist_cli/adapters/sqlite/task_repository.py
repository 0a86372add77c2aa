"""SQLite implementation of TaskRepository."""

from __future__ import annotations

import sqlite3
from typing import Any

from checklist_cli.adapters.sqlite.connection import get_connection
from checklist_cli.adapters.sqlite.user_manager import get_or_create_local_user
from checklist_cli.adapters.sqlite.utils import (
    build_update_clause,
    generate_uuid,
    now_iso,
    placeholders,
    row_to_dict,
)
from checklist_cli.exceptions import NotFoundError, StoreError
from checklist_cli.models import (
    RecurrencePattern,
    SortUpdate,
    Task,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
)
from checklist_cli.repositories import TaskRepository
from checklist_cli.utils.logger import get_logger

logger = get_logger(__name__)

# Task columns plus the joined recurrence and category, prefixed so they do not
# collide with task columns.
_SELECT_TASKS = """
    SELECT t.*,
           r.id AS r_id, r.pattern AS r_pattern, r.weekly_day AS r_weekly_day,
           r.created_at AS r_created_at,
           c.name AS c_name, c.color AS c_color, c.created_at AS c_created_at
    FROM tasks t
    LEFT JOIN task_recurrence r ON r.task_id = t.id
    LEFT JOIN categories c ON c.id = t.category_id
"""


def _row_to_task(row: sqlite3.Row) -> Task:
    data = row_to_dict(row)
    recurrence = None
    if data.get("r_id"):
        recurrence = {
            "id": data["r_id"],
            "task_id": data["id"],
            "pattern": data["r_pattern"],
            "weekly_day": data["r_weekly_day"],
            "created_at": data["r_created_at"],
        }
    category = None
    if data.get("category_id") and data.get("c_name") is not None:
        category = {
            "id": data["category_id"],
            "name": data["c_name"],
            "color": data["c_color"],
            "created_at": data["c_created_at"],
        }
    task_fields = {
        key: value
        for key, value in data.items()
        if not key.startswith(("r_", "c_")) and key != "user_id"
    }
    return Task(**task_fields, recurrence=recurrence, category=category)


class SqliteTaskRepository(TaskRepository):
    """SQLite implementation of task repository."""

    def __init__(
        self,
        db_path: str | None = None,
        connection: sqlite3.Connection | None = None,
    ):
        """Initialize SQLite task repository.

        Args:
            db_path: Optional database file path. If None, uses default location.
            connection: Optional pre-opened connection (used by tests).
        """
        self.db_path = db_path
        self._connection = connection
        self._user_id: str | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    def _get_user_id(self) -> str:
        if self._user_id is None:
            self._user_id = get_or_create_local_user(self.connection)
        return self._user_id

    def _fetch(self, where: str, params: list[Any]) -> list[Task]:
        query = f"{_SELECT_TASKS} WHERE t.user_id = ? AND {where}"
        query += " ORDER BY t.sort_order ASC, t.created_at DESC"
        cursor = self.connection.execute(query, [self._get_user_id(), *params])
        return [_row_to_task(row) for row in cursor.fetchall()]

    async def list_all(self, filters: TaskFilters) -> list[Task]:
        """List all tasks with filtering."""
        conditions = ["1=1"]
        params: list[Any] = []

        if filters.status == "active":
            conditions.append("t.completed_at IS NULL")
        elif filters.status == "completed":
            conditions.append("t.completed_at IS NOT NULL")

        if filters.category_id:
            conditions.append("t.category_id = ?")
            params.append(filters.category_id)

        if filters.search:
            conditions.append("(t.title LIKE ? OR t.notes LIKE ?)")
            term = f"%{filters.search}%"
            params.extend([term, term])

        return self._fetch(" AND ".join(conditions), params)

    async def get(self, task_id: str) -> Task:
        """Get a specific task by ID."""
        tasks = self._fetch("t.id = ?", [task_id])
        if not tasks:
            raise NotFoundError(f"Task not found: {task_id}")
        return tasks[0]

    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task and, when recurring, its recurrence row."""
        user_id = self._get_user_id()
        task_id = generate_uuid()
        now = now_iso()

        values = {
            "id": task_id,
            "title": task_data.title,
            "notes": task_data.notes,
            "category_id": task_data.category_id,
            "due_date": task_data.due_date,
            "due_time": task_data.due_time,
            "start_time": task_data.start_time,
            "end_time": task_data.end_time,
            "sort_order": task_data.sort_order or 0,
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
        }
        _, params = build_update_clause(values)
        try:
            self.connection.execute(
                f"INSERT INTO tasks ({', '.join(values)}) VALUES ({placeholders(len(values))})",
                params,
            )
            if task_data.pattern != RecurrencePattern.NONE:
                self._upsert_recurrence(task_id, task_data.pattern, task_data.weekly_day)
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StoreError(f"Failed to create task: {e}") from e

        return await self.get(task_id)

    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        """Update an existing task; explicitly-set None clears a column."""
        changes = updates.changes()
        if not changes:
            return await self.get(task_id)

        set_clause, params = build_update_clause({**changes, "updated_at": now_iso()})
        try:
            cursor = self.connection.execute(
                f"UPDATE tasks SET {set_clause} WHERE id = ? AND user_id = ?",
                [*params, task_id, self._get_user_id()],
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StoreError(f"Failed to update task: {e}") from e

        if cursor.rowcount == 0:
            raise NotFoundError(f"Task not found: {task_id}")
        return await self.get(task_id)

    async def bulk_update(self, task_ids: list[str], updates: TaskUpdate) -> None:
        """Apply one patch to many tasks in a single statement."""
        changes = updates.changes()
        if not task_ids or not changes:
            return

        set_clause, params = build_update_clause({**changes, "updated_at": now_iso()})
        try:
            self.connection.execute(
                f"UPDATE tasks SET {set_clause} "
                f"WHERE user_id = ? AND id IN ({placeholders(len(task_ids))})",
                [*params, self._get_user_id(), *task_ids],
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StoreError(f"Bulk update failed: {e}") from e

    async def delete(self, task_id: str) -> bool:
        """Delete a task; its recurrence row goes with it."""
        return await self.bulk_delete([task_id]) > 0

    async def bulk_delete(self, task_ids: list[str]) -> int:
        """Delete many tasks in a single statement."""
        if not task_ids:
            return 0
        try:
            cursor = self.connection.execute(
                f"DELETE FROM tasks WHERE user_id = ? AND id IN ({placeholders(len(task_ids))})",
                [self._get_user_id(), *task_ids],
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StoreError(f"Bulk delete failed: {e}") from e
        return cursor.rowcount

    async def batch_reorder(self, updates: list[SortUpdate]) -> None:
        """Write every (sort_order, category_id) pair in one transaction."""
        if not updates:
            return

        user_id = self._get_user_id()
        now = now_iso()
        try:
            for update in updates:
                cursor = self.connection.execute(
                    "UPDATE tasks SET sort_order = ?, category_id = ?, updated_at = ? "
                    "WHERE id = ? AND user_id = ?",
                    (update.sort_order, update.category_id, now, update.id, user_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError(f"Task not found: {update.id}")
            self.connection.commit()
        except (sqlite3.Error, NotFoundError) as e:
            self.connection.rollback()
            logger.warning("Reorder of %d tasks rolled back: %s", len(updates), e)
            raise StoreError(f"Reorder failed: {e}") from e

    async def set_recurrence(
        self,
        task_id: str,
        pattern: RecurrencePattern,
        weekly_day: int | None = None,
    ) -> None:
        """Insert, update or remove the recurrence row of a task."""
        try:
            if pattern == RecurrencePattern.NONE:
                self.connection.execute(
                    "DELETE FROM task_recurrence WHERE task_id = ?", (task_id,)
                )
            else:
                self._upsert_recurrence(task_id, pattern, weekly_day)
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StoreError(f"Failed to save recurrence: {e}") from e

    def _upsert_recurrence(
        self, task_id: str, pattern: RecurrencePattern, weekly_day: int | None
    ) -> None:
        if pattern != RecurrencePattern.WEEKLY:
            weekly_day = None
        self.connection.execute(
            """INSERT INTO task_recurrence (id, task_id, pattern, weekly_day, created_at)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT(task_id) DO UPDATE SET
                   pattern = excluded.pattern,
                   weekly_day = excluded.weekly_day""",
            (generate_uuid(), task_id, RecurrencePattern(pattern).value, weekly_day, now_iso()),
        )
