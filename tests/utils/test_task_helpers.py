"""Unit tests for task helpers: id suffixes and checklist display order."""

from __future__ import annotations

from datetime import UTC, date, datetime, time

import pytest

from checklist_cli.exceptions import NotFoundError, ValidationError
from checklist_cli.utils.task_helpers import (
    calculate_unique_suffixes,
    find_shortest_unique_suffix,
    match_task_id,
    sort_visible_tasks,
)


class TestUniqueSuffixes:
    def test_shortest_unique_suffix(self):
        ids = ["abc123", "xyz423", "def999"]
        assert find_shortest_unique_suffix(ids, "abc123") == "123"
        assert find_shortest_unique_suffix(ids, "def999") == "9"

    def test_calculate_unique_suffixes(self):
        assert calculate_unique_suffixes(["aa1", "bb2"]) == {"aa1": "1", "bb2": "2"}


class TestMatchTaskId:
    def test_full_id(self, task_factory):
        tasks = [task_factory("abc123"), task_factory("def456")]
        assert match_task_id(tasks, "abc123") == "abc123"

    def test_unique_suffix(self, task_factory):
        tasks = [task_factory("abc123"), task_factory("def456")]
        assert match_task_id(tasks, "56") == "def456"

    def test_ambiguous_suffix(self, task_factory):
        tasks = [task_factory("abc123"), task_factory("def423")]
        with pytest.raises(ValidationError, match="Ambiguous"):
            match_task_id(tasks, "23")

    def test_not_found(self, task_factory):
        with pytest.raises(NotFoundError):
            match_task_id([task_factory("abc123")], "zzz")


class TestSortVisibleTasks:
    def test_display_order(self, task_factory):
        early = datetime(2024, 1, 1, tzinfo=UTC)
        late = datetime(2024, 1, 5, tzinfo=UTC)
        tasks = [
            task_factory("done", completed_at=late, due_date=date(2024, 1, 1), due_time=time(8, 0)),
            task_factory("undated-old", created_at=early),
            task_factory("dated-late", due_date=date(2024, 1, 20)),
            task_factory("timed-late", due_date=date(2024, 1, 15), due_time=time(9, 0)),
            task_factory("undated-new", created_at=late),
            task_factory("dated-early", due_date=date(2024, 1, 12)),
            task_factory("timed-early", due_date=date(2024, 1, 11), due_time=time(18, 0)),
        ]

        assert [t.id for t in sort_visible_tasks(tasks)] == [
            "timed-early",
            "timed-late",
            "dated-early",
            "dated-late",
            "undated-new",
            "undated-old",
            "done",
        ]

    def test_same_due_date_keeps_input_order(self, task_factory):
        tasks = [
            task_factory("first", due_date=date(2024, 1, 12), created_at=datetime(2024, 1, 1, tzinfo=UTC)),
            task_factory("second", due_date=date(2024, 1, 12), created_at=datetime(2024, 1, 9, tzinfo=UTC)),
        ]
        assert [t.id for t in sort_visible_tasks(tasks)] == ["first", "second"]
