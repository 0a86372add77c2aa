"""Recurrence rules for the Checklist CLI.

Pure decision functions over a task's recurrence state and the current time.
They never raise: an unparsable ``completed_at`` or ``due_date`` means the rule
does not apply (show -> True, reset/delete -> False).

Weekly tasks have no reset rule: a completed weekly task stays completed until
it is reopened by hand, even across week boundaries.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

from checklist_cli.models.core import RecurrencePattern
from checklist_cli.utils.dates import parse_instant

# Completed one-off tasks are purged once this much time has elapsed.
AUTO_DELETE_AFTER = timedelta(hours=24)

VALID_PATTERNS = [p.value for p in RecurrencePattern]

WEEKDAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


def resolve_pattern(pattern: str | RecurrencePattern | None) -> RecurrencePattern | None:
    """Convert a pattern name to a RecurrencePattern.

    Args:
        pattern: Pattern name (e.g., "daily", "Weekly"); None means "none"

    Returns:
        RecurrencePattern, or None if pattern is not recognized
    """
    if pattern is None:
        return RecurrencePattern.NONE
    if isinstance(pattern, RecurrencePattern):
        return pattern
    try:
        return RecurrencePattern(pattern.strip().lower())
    except ValueError:
        return None


def describe_recurrence(pattern: str | RecurrencePattern | None, weekly_day: int | None) -> str:
    """Human-readable description, e.g. "weekly on Wednesday"."""
    resolved = resolve_pattern(pattern)
    if resolved is None:
        return str(pattern)
    if resolved == RecurrencePattern.WEEKLY and weekly_day is not None and 0 <= weekly_day <= 6:
        return f"weekly on {WEEKDAY_NAMES[weekly_day]}"
    return resolved.value


def sunday_based_weekday(day: date) -> int:
    """Weekday index with Sunday = 0 ... Saturday = 6."""
    return (day.weekday() + 1) % 7


def _as_local(instant: datetime, now: datetime) -> datetime | None:
    """Express *instant* in *now*'s zone; None if the two cannot be compared."""
    if now.tzinfo is None:
        return instant if instant.tzinfo is None else None
    if instant.tzinfo is None:
        return instant.replace(tzinfo=now.tzinfo)
    return instant.astimezone(now.tzinfo)


def should_reset_daily(
    completed_at: str | datetime | None,
    pattern: str | RecurrencePattern | None,
    now: datetime,
) -> bool:
    """Whether a completed daily task should be reopened.

    True iff the pattern is daily and the local calendar day of completion is
    strictly before today's. Midnight is the boundary, not 24 elapsed hours.
    """
    if resolve_pattern(pattern) != RecurrencePattern.DAILY:
        return False
    completed = parse_instant(completed_at)
    if completed is None:
        return False
    completed = _as_local(completed, now)
    if completed is None:
        return False
    return completed.date() < now.date()


def should_auto_delete(
    completed_at: str | datetime | None,
    pattern: str | RecurrencePattern | None,
    now: datetime,
) -> bool:
    """Whether a completed one-off task has expired.

    True iff the pattern is none and at least 24 hours have elapsed since
    completion. Elapsed time is measured in UTC, so DST shifts in *now*'s
    zone do not move the threshold.
    """
    if resolve_pattern(pattern) != RecurrencePattern.NONE:
        return False
    completed = parse_instant(completed_at)
    if completed is None:
        return False
    completed = _as_local(completed, now)
    if completed is None:
        return False
    if now.tzinfo is None:
        return now >= completed + AUTO_DELETE_AFTER
    return now.astimezone(UTC) >= completed.astimezone(UTC) + AUTO_DELETE_AFTER


def should_show(
    due_date: str | date | None,
    completed_at: str | datetime | None,
    pattern: str | RecurrencePattern | None,
    weekly_day: int | None,
    now: datetime,
) -> bool:
    """Whether a task is visible in the checklist right now.

    One-off and daily tasks are always shown (completed daily tasks stay
    visible until the next reset). Weekly tasks show only on their day, or
    always when no day is set; completion does not matter.
    """
    resolved = resolve_pattern(pattern)
    if resolved != RecurrencePattern.WEEKLY:
        return True
    if weekly_day is None:
        return True
    try:
        day = int(weekly_day)
    except (TypeError, ValueError):
        return True
    return sunday_based_weekday(now.date()) == day
