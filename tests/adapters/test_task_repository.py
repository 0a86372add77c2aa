"""Unit tests for the SQLite repositories.

Uses an in-memory SQLite database with the full migration schema applied, so we
test the real SQL without touching production data.
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, date, datetime, time

import pytest

from checklist_cli.exceptions import NotFoundError, StoreError
from checklist_cli.models import (
    CategoryCreate,
    CategoryUpdate,
    RecurrencePattern,
    SortUpdate,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
)

ALL = TaskFilters(status="all")


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TestAddAndGet:
    @pytest.mark.asyncio
    async def test_add_round_trips_fields(self, task_repo):
        task = await task_repo.add(
            TaskCreate(
                title="Dentist",
                notes="Bring card",
                due_date=date(2024, 1, 12),
                due_time=time(15, 30),
                start_time=time(15, 0),
                end_time=time(16, 0),
                sort_order=0,
            )
        )

        fetched = await task_repo.get(task.id)
        assert fetched.title == "Dentist"
        assert fetched.notes == "Bring card"
        assert fetched.due_date == date(2024, 1, 12)
        assert fetched.due_time == time(15, 30)
        assert fetched.end_time == time(16, 0)
        assert fetched.completed_at is None
        assert fetched.recurrence is None

    @pytest.mark.asyncio
    async def test_add_weekly_creates_recurrence(self, task_repo):
        task = await task_repo.add(
            TaskCreate(title="Bins", pattern=RecurrencePattern.WEEKLY, weekly_day=0)
        )
        assert task.pattern == RecurrencePattern.WEEKLY
        assert task.weekly_day == 0

    @pytest.mark.asyncio
    async def test_category_is_joined(self, task_repo, category_repo):
        category = await category_repo.add(CategoryCreate(name="Work", color="#ff0000"))
        task = await task_repo.add(TaskCreate(title="Report", category_id=category.id))

        assert task.category is not None
        assert task.category.name == "Work"
        assert task.group_key == category.id

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, task_repo):
        with pytest.raises(NotFoundError):
            await task_repo.get("nope")


class TestListAll:
    @pytest.mark.asyncio
    async def test_status_filters(self, task_repo):
        open_task = await task_repo.add(TaskCreate(title="Open"))
        done = await task_repo.add(TaskCreate(title="Done"))
        await task_repo.update(done.id, TaskUpdate(completed_at=datetime(2024, 1, 1, tzinfo=UTC)))

        active = await task_repo.list_all(TaskFilters(status="active"))
        completed = await task_repo.list_all(TaskFilters(status="completed"))

        assert [t.id for t in active] == [open_task.id]
        assert [t.id for t in completed] == [done.id]
        assert len(await task_repo.list_all(ALL)) == 2

    @pytest.mark.asyncio
    async def test_search_title_and_notes(self, task_repo):
        await task_repo.add(TaskCreate(title="Buy milk"))
        await task_repo.add(TaskCreate(title="Call", notes="about MILK delivery"))
        await task_repo.add(TaskCreate(title="Other"))

        found = await task_repo.list_all(TaskFilters(search="milk"))
        assert sorted(t.title for t in found) == ["Buy milk", "Call"]

    @pytest.mark.asyncio
    async def test_ordered_by_sort_order(self, task_repo):
        second = await task_repo.add(TaskCreate(title="second", sort_order=1))
        first = await task_repo.add(TaskCreate(title="first", sort_order=0))

        assert [t.id for t in await task_repo.list_all(ALL)] == [first.id, second.id]


class TestUpdate:
    @pytest.mark.asyncio
    async def test_explicit_none_clears_column(self, task_repo):
        task = await task_repo.add(TaskCreate(title="t", due_date=date(2024, 1, 1)))
        updated = await task_repo.update(task.id, TaskUpdate(due_date=None))
        assert updated.due_date is None

    @pytest.mark.asyncio
    async def test_unset_fields_untouched(self, task_repo):
        task = await task_repo.add(TaskCreate(title="t", notes="keep"))
        updated = await task_repo.update(task.id, TaskUpdate(title="renamed"))
        assert updated.title == "renamed"
        assert updated.notes == "keep"

    @pytest.mark.asyncio
    async def test_missing_task_raises(self, task_repo):
        with pytest.raises(NotFoundError):
            await task_repo.update("nope", TaskUpdate(title="x"))

    @pytest.mark.asyncio
    async def test_bulk_update_reopens(self, task_repo):
        done = datetime(2024, 1, 1, tzinfo=UTC)
        a = await task_repo.add(TaskCreate(title="a"))
        b = await task_repo.add(TaskCreate(title="b"))
        for task in (a, b):
            await task_repo.update(task.id, TaskUpdate(completed_at=done))

        await task_repo.bulk_update([a.id, b.id], TaskUpdate(completed_at=None))

        assert await task_repo.list_all(TaskFilters(status="completed")) == []


class TestDelete:
    @pytest.mark.asyncio
    async def test_bulk_delete_returns_count(self, task_repo):
        a = await task_repo.add(TaskCreate(title="a"))
        b = await task_repo.add(TaskCreate(title="b"))
        assert await task_repo.bulk_delete([a.id, b.id, "ghost"]) == 2
        assert await task_repo.bulk_delete([]) == 0

    @pytest.mark.asyncio
    async def test_delete_removes_recurrence(self, task_repo, db_connection):
        task = await task_repo.add(TaskCreate(title="daily", pattern=RecurrencePattern.DAILY))
        assert await task_repo.delete(task.id) is True

        count = db_connection.execute("SELECT COUNT(*) FROM task_recurrence").fetchone()[0]
        assert count == 0
        assert await task_repo.delete(task.id) is False


class TestBatchReorder:
    @pytest.mark.asyncio
    async def test_moves_across_groups(self, task_repo, category_repo):
        work = await category_repo.add(CategoryCreate(name="Work"))
        a = await task_repo.add(TaskCreate(title="a", category_id=work.id, sort_order=0))
        b = await task_repo.add(TaskCreate(title="b", category_id=work.id, sort_order=1))

        await task_repo.batch_reorder(
            [
                SortUpdate(id=b.id, sort_order=0, category_id=work.id),
                SortUpdate(id=a.id, sort_order=0, category_id=None),
            ]
        )

        assert (await task_repo.get(a.id)).category_id is None
        assert (await task_repo.get(b.id)).sort_order == 0

    @pytest.mark.asyncio
    async def test_all_or_nothing(self, task_repo):
        a = await task_repo.add(TaskCreate(title="a", sort_order=0))
        b = await task_repo.add(TaskCreate(title="b", sort_order=1))

        with pytest.raises(StoreError, match="Reorder failed"):
            await task_repo.batch_reorder(
                [
                    SortUpdate(id=b.id, sort_order=0),
                    SortUpdate(id=a.id, sort_order=1),
                    SortUpdate(id="ghost", sort_order=2),
                ]
            )

        assert (await task_repo.get(a.id)).sort_order == 0
        assert (await task_repo.get(b.id)).sort_order == 1


class TestSetRecurrence:
    @pytest.mark.asyncio
    async def test_add_change_remove(self, task_repo):
        task = await task_repo.add(TaskCreate(title="t"))

        await task_repo.set_recurrence(task.id, RecurrencePattern.WEEKLY, 3)
        assert (await task_repo.get(task.id)).weekly_day == 3

        await task_repo.set_recurrence(task.id, RecurrencePattern.DAILY, 3)
        fetched = await task_repo.get(task.id)
        assert fetched.pattern == RecurrencePattern.DAILY
        assert fetched.weekly_day is None

        await task_repo.set_recurrence(task.id, RecurrencePattern.NONE)
        assert (await task_repo.get(task.id)).recurrence is None


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class TestCategoryRepository:
    @pytest.mark.asyncio
    async def test_crud(self, category_repo):
        category = await category_repo.add(CategoryCreate(name="Home"))
        renamed = await category_repo.update(category.id, CategoryUpdate(name="House"))

        assert renamed.name == "House"
        assert [c.id for c in await category_repo.list_all()] == [category.id]
        assert await category_repo.delete(category.id) is True
        with pytest.raises(NotFoundError):
            await category_repo.get(category.id)

    @pytest.mark.asyncio
    async def test_delete_detaches_tasks(self, category_repo, task_repo):
        category = await category_repo.add(CategoryCreate(name="Home"))
        task = await task_repo.add(TaskCreate(title="Dishes", category_id=category.id))

        await category_repo.delete(category.id)

        assert (await task_repo.get(task.id)).category_id is None


class TestSchema:
    def test_sort_order_cannot_be_negative(self, db_connection, task_repo):
        user_id = task_repo._get_user_id()
        with pytest.raises(sqlite3.IntegrityError):
            db_connection.execute(
                "INSERT INTO tasks (id, title, sort_order, user_id, created_at, updated_at) "
                "VALUES ('x', 't', -1, ?, '2024-01-01', '2024-01-01')",
                (user_id,),
            )

    def test_migrations_recorded(self, db_connection):
        version = db_connection.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
        assert version == 1

    def test_local_user_created_once(self, db_connection, task_repo, category_repo):
        assert task_repo._get_user_id() == category_repo._get_user_id()
        columns = {row[1] for row in db_connection.execute("PRAGMA table_info(users)")}
        assert columns == {"id", "email", "name", "created_at", "updated_at"}
        assert db_connection.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 1
