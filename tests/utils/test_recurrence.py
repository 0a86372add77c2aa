"""Unit tests for recurrence rules."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from checklist_cli.models import RecurrencePattern
from checklist_cli.utils.recurrence import (
    VALID_PATTERNS,
    describe_recurrence,
    resolve_pattern,
    should_auto_delete,
    should_reset_daily,
    should_show,
    sunday_based_weekday,
)

NEW_YORK = ZoneInfo("America/New_York")


class TestResolvePattern:
    def test_names(self):
        assert resolve_pattern("daily") == RecurrencePattern.DAILY
        assert resolve_pattern("Weekly") == RecurrencePattern.WEEKLY
        assert resolve_pattern(" none ") == RecurrencePattern.NONE

    def test_none_means_no_recurrence(self):
        assert resolve_pattern(None) == RecurrencePattern.NONE

    def test_unknown_returns_none(self):
        assert resolve_pattern("monthly") is None
        assert resolve_pattern("") is None

    def test_valid_patterns(self):
        assert VALID_PATTERNS == ["none", "daily", "weekly"]


class TestDescribeRecurrence:
    def test_weekly_with_day(self):
        assert describe_recurrence("weekly", 3) == "weekly on Wednesday"
        assert describe_recurrence(RecurrencePattern.WEEKLY, 0) == "weekly on Sunday"

    def test_weekly_without_day(self):
        assert describe_recurrence("weekly", None) == "weekly"

    def test_unknown_pattern_returned_as_is(self):
        assert describe_recurrence("hourly", None) == "hourly"


class TestSundayBasedWeekday:
    def test_sunday_is_zero(self):
        assert sunday_based_weekday(date(2024, 1, 7)) == 0

    def test_wednesday_is_three(self):
        assert sunday_based_weekday(date(2024, 1, 10)) == 3

    def test_saturday_is_six(self):
        assert sunday_based_weekday(date(2024, 1, 13)) == 6


class TestShouldResetDaily:
    def test_yesterday_late_completion_resets_after_midnight(self):
        completed = datetime(2024, 1, 1, 23, 59, tzinfo=NEW_YORK)
        now = datetime(2024, 1, 2, 0, 1, tzinfo=NEW_YORK)
        assert should_reset_daily(completed, "daily", now) is True

    def test_same_day_does_not_reset(self):
        completed = datetime(2024, 1, 1, 23, 59, tzinfo=NEW_YORK)
        now = datetime(2024, 1, 1, 23, 59, 30, tzinfo=NEW_YORK)
        assert should_reset_daily(completed, "daily", now) is False

    def test_calendar_day_not_elapsed_hours(self):
        """Two minutes across midnight resets; 23 hours within one day does not."""
        assert should_reset_daily(
            datetime(2024, 1, 1, 23, 58, tzinfo=UTC), "daily", datetime(2024, 1, 2, 0, 0, tzinfo=UTC)
        )
        assert not should_reset_daily(
            datetime(2024, 1, 2, 0, 30, tzinfo=UTC), "daily", datetime(2024, 1, 2, 23, 30, tzinfo=UTC)
        )

    def test_day_is_taken_in_now_zone(self):
        """03:00 UTC on Jan 2 is still Jan 1 in New York."""
        completed = datetime(2024, 1, 2, 3, 0, tzinfo=UTC)
        assert should_reset_daily(completed, "daily", datetime(2024, 1, 1, 23, 0, tzinfo=NEW_YORK)) is False
        assert should_reset_daily(completed, "daily", datetime(2024, 1, 2, 0, 5, tzinfo=NEW_YORK)) is True

    def test_iso_string_input(self):
        now = datetime(2024, 1, 2, 8, 0, tzinfo=UTC)
        assert should_reset_daily("2024-01-01T10:00:00+00:00", "daily", now) is True
        assert should_reset_daily("2024-01-01T10:00:00Z", "daily", now) is True

    @pytest.mark.parametrize("pattern", ["none", "weekly", None])
    def test_only_daily_resets(self, pattern):
        completed = datetime(2023, 12, 1, tzinfo=UTC)
        assert should_reset_daily(completed, pattern, datetime(2024, 1, 10, tzinfo=UTC)) is False

    def test_weekly_never_resets_across_weeks(self):
        completed = datetime(2024, 1, 3, 12, 0, tzinfo=UTC)
        now = completed + timedelta(weeks=3)
        assert should_reset_daily(completed, "weekly", now) is False

    def test_midnight_boundary_across_spring_forward(self):
        # 2024-03-10 is a 23-hour day in New York.
        completed = datetime(2024, 3, 9, 23, 30, tzinfo=NEW_YORK)
        assert should_reset_daily(completed, "daily", datetime(2024, 3, 10, 0, 5, tzinfo=NEW_YORK)) is True

        same_day = datetime(2024, 3, 10, 5, 30, tzinfo=UTC)  # 00:30 EST
        assert should_reset_daily(same_day, "daily", datetime(2024, 3, 10, 23, 50, tzinfo=NEW_YORK)) is False

    def test_midnight_boundary_across_fall_back(self):
        # 2024-11-03 is a 25-hour day in New York.
        completed = datetime(2024, 11, 3, 5, 30, tzinfo=UTC)  # 01:30 EDT
        assert should_reset_daily(completed, "daily", datetime(2024, 11, 3, 23, 59, tzinfo=NEW_YORK)) is False
        assert should_reset_daily(completed, "daily", datetime(2024, 11, 4, 0, 1, tzinfo=NEW_YORK)) is True

    @pytest.mark.parametrize("completed_at", [None, "", "not-a-date", "2024-13-45T00:00"])
    def test_missing_or_malformed_fails_closed(self, completed_at):
        assert should_reset_daily(completed_at, "daily", datetime(2024, 1, 10, tzinfo=UTC)) is False


class TestShouldAutoDelete:
    def test_more_than_24_hours_deletes(self):
        now = datetime(2024, 1, 10, 12, 0, tzinfo=UTC)
        completed = now - timedelta(hours=24, seconds=1)
        assert should_auto_delete(completed, "none", now) is True

    def test_exactly_24_hours_deletes(self):
        now = datetime(2024, 1, 10, 12, 0, tzinfo=UTC)
        assert should_auto_delete(now - timedelta(hours=24), "none", now) is True

    def test_less_than_24_hours_kept(self):
        now = datetime(2024, 1, 10, 12, 0, tzinfo=UTC)
        completed = now - timedelta(hours=23, minutes=59)
        assert should_auto_delete(completed, "none", now) is False

    def test_no_recurrence_counts_as_none(self):
        now = datetime(2024, 1, 10, 12, 0, tzinfo=UTC)
        assert should_auto_delete(now - timedelta(days=2), None, now) is True

    @pytest.mark.parametrize("pattern", ["daily", "weekly"])
    def test_recurring_tasks_never_deleted(self, pattern):
        now = datetime(2024, 1, 10, 12, 0, tzinfo=UTC)
        assert should_auto_delete(now - timedelta(days=30), pattern, now) is False

    def test_elapsed_hours_across_spring_forward(self):
        completed = datetime(2024, 3, 9, 10, 0, tzinfo=NEW_YORK)  # EST
        # Same wall-clock time next day is only 23 hours later.
        assert should_auto_delete(completed, "none", datetime(2024, 3, 10, 10, 0, tzinfo=NEW_YORK)) is False
        assert should_auto_delete(completed, "none", datetime(2024, 3, 10, 11, 0, tzinfo=NEW_YORK)) is True

    def test_elapsed_hours_across_fall_back(self):
        completed = datetime(2024, 11, 2, 10, 0, tzinfo=NEW_YORK)  # EDT
        # 09:30 EST next day is 24.5 hours later; 08:30 EST is 23.5.
        assert should_auto_delete(completed, "none", datetime(2024, 11, 3, 9, 30, tzinfo=NEW_YORK)) is True
        assert should_auto_delete(completed, "none", datetime(2024, 11, 3, 8, 30, tzinfo=NEW_YORK)) is False

    def test_utc_completion_against_local_now(self):
        """Completed 2024-01-01 10:00 New York time, stored as UTC."""
        completed_at = "2024-01-01T15:00:00Z"
        assert should_auto_delete(completed_at, "none", datetime(2024, 1, 2, 10, 0, 1, tzinfo=NEW_YORK)) is True
        assert should_auto_delete(completed_at, "none", datetime(2024, 1, 2, 9, 59, 59, tzinfo=NEW_YORK)) is False

    @pytest.mark.parametrize("completed_at", [None, "garbage"])
    def test_missing_or_malformed_fails_closed(self, completed_at):
        assert should_auto_delete(completed_at, "none", datetime(2024, 1, 10, tzinfo=UTC)) is False


class TestShouldShow:
    WEDNESDAY = datetime(2024, 1, 10, 9, 0, tzinfo=UTC)
    THURSDAY = datetime(2024, 1, 11, 9, 0, tzinfo=UTC)
    SUNDAY = datetime(2024, 1, 7, 9, 0, tzinfo=UTC)

    def test_weekly_shown_only_on_its_day(self):
        assert should_show(None, None, "weekly", 3, self.WEDNESDAY) is True
        assert should_show(None, None, "weekly", 3, self.THURSDAY) is False

    def test_weekly_visibility_ignores_completion(self):
        completed = datetime(2024, 1, 10, 8, 0, tzinfo=UTC)
        assert should_show(None, completed, "weekly", 3, self.WEDNESDAY) is True
        assert should_show(None, completed, "weekly", 3, self.THURSDAY) is False

    def test_sunday_is_a_real_day(self):
        assert should_show(None, None, "weekly", 0, self.SUNDAY) is True
        assert should_show(None, None, "weekly", 0, self.WEDNESDAY) is False

    def test_weekly_without_day_always_shown(self):
        assert should_show(None, None, "weekly", None, self.THURSDAY) is True

    @pytest.mark.parametrize("pattern", ["none", "daily", None])
    def test_non_weekly_always_shown(self, pattern):
        completed = datetime(2024, 1, 1, tzinfo=UTC)
        assert should_show("2023-01-01", completed, pattern, None, self.THURSDAY) is True

    def test_malformed_weekly_day_fails_open(self):
        assert should_show(None, None, "weekly", "someday", self.THURSDAY) is True
