"""SQLite implementation of CategoryRepository."""

from __future__ import annotations

import sqlite3

from checklist_cli.adapters.sqlite.connection import get_connection
from checklist_cli.adapters.sqlite.user_manager import get_or_create_local_user
from checklist_cli.adapters.sqlite.utils import (
    build_update_clause,
    generate_uuid,
    now_iso,
    row_to_dict,
)
from checklist_cli.exceptions import NotFoundError, StoreError
from checklist_cli.models import Category, CategoryCreate, CategoryUpdate
from checklist_cli.repositories import CategoryRepository


class SqliteCategoryRepository(CategoryRepository):
    """SQLite implementation of category repository."""

    def __init__(
        self,
        db_path: str | None = None,
        connection: sqlite3.Connection | None = None,
    ):
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

    async def list_all(self) -> list[Category]:
        cursor = self.connection.execute(
            "SELECT id, name, color, created_at FROM categories "
            "WHERE user_id = ? ORDER BY created_at, name",
            (self._get_user_id(),),
        )
        return [Category(**row_to_dict(row)) for row in cursor.fetchall()]

    async def get(self, category_id: str) -> Category:
        cursor = self.connection.execute(
            "SELECT id, name, color, created_at FROM categories WHERE id = ? AND user_id = ?",
            (category_id, self._get_user_id()),
        )
        row = cursor.fetchone()
        if not row:
            raise NotFoundError(f"Category not found: {category_id}")
        return Category(**row_to_dict(row))

    async def add(self, category_data: CategoryCreate) -> Category:
        category_id = generate_uuid()
        now = now_iso()
        try:
            self.connection.execute(
                """INSERT INTO categories (id, name, color, user_id, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (category_id, category_data.name, category_data.color,
                 self._get_user_id(), now, now),
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StoreError(f"Failed to create category: {e}") from e
        return await self.get(category_id)

    async def update(self, category_id: str, updates: CategoryUpdate) -> Category:
        changes = updates.model_dump(exclude_none=True)
        if not changes:
            return await self.get(category_id)

        set_clause, params = build_update_clause({**changes, "updated_at": now_iso()})
        cursor = self.connection.execute(
            f"UPDATE categories SET {set_clause} WHERE id = ? AND user_id = ?",
            [*params, category_id, self._get_user_id()],
        )
        self.connection.commit()
        if cursor.rowcount == 0:
            raise NotFoundError(f"Category not found: {category_id}")
        return await self.get(category_id)

    async def delete(self, category_id: str) -> bool:
        """Delete a category; ON DELETE SET NULL detaches its tasks."""
        try:
            cursor = self.connection.execute(
                "DELETE FROM categories WHERE id = ? AND user_id = ?",
                (category_id, self._get_user_id()),
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise StoreError(f"Failed to delete category: {e}") from e
        return cursor.rowcount > 0
