"""Lenient date/time parsing and display helpers.

Parsers return ``None`` instead of raising so callers at the decision
boundary (recurrence evaluation, overdue checks) can fail closed.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo

import dateparser


def parse_date(value: str | date | datetime | None) -> date | None:
    """Parse a calendar date (``YYYY-MM-DD``); datetimes are truncated."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def parse_time(value: str | time | None) -> time | None:
    """Parse a time of day (``HH:MM`` or ``HH:MM:SS``)."""
    if value is None:
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return time.fromisoformat(text)
        except ValueError:
            return None
    return None


def parse_due_date(value: str, today: date) -> date | None:
    """Parse a due date typed by the user, relative to *today*.

    Accepts ``YYYY-MM-DD``, ``today``, ``tomorrow`` and phrases such as
    ``next friday`` or ``in 3 days``; relative phrases resolve forward.
    """
    text = value.strip().lower()
    if text == "today":
        return today
    if text == "tomorrow":
        return today + timedelta(days=1)

    parsed = parse_date(text)
    if parsed is not None:
        return parsed

    result = dateparser.parse(
        text,
        settings={
            "PREFER_DATES_FROM": "future",
            "RELATIVE_BASE": datetime.combine(today, time(12, 0)),
        },
    )
    return result.date() if result else None


def parse_instant(
    value: str | datetime | None, tz: tzinfo | None = None
) -> datetime | None:
    """Parse an ISO instant; naive values are placed in *tz* when given."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None and tz is not None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def is_task_overdue(
    due_date: str | date | None,
    due_time: str | time | None,
    now: datetime,
) -> bool:
    """Whether a task's due moment has passed.

    A timed task is overdue once its due instant is before *now*; an untimed
    task only once its due day is before today.
    """
    parsed_date = parse_date(due_date)
    if parsed_date is None:
        return False

    parsed_time = parse_time(due_time)
    if parsed_time is not None:
        due_at = datetime.combine(parsed_date, parsed_time, tzinfo=now.tzinfo)
        return due_at < now

    return parsed_date < now.date()


def format_date(value: str | date | None) -> str:
    """``2024-01-05`` -> ``Jan 5, 2024``."""
    parsed = parse_date(value)
    if parsed is None:
        return ""
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_time(value: str | time | None) -> str:
    """``14:30`` -> ``2:30 PM``."""
    parsed = parse_time(value)
    if parsed is None:
        return ""
    hour = parsed.hour % 12 or 12
    return f"{hour}:{parsed.minute:02d} {'AM' if parsed.hour < 12 else 'PM'}"


def format_due(due_date: str | date | None, due_time: str | time | None) -> str:
    """Combined due label, e.g. ``Jan 5, 2024 at 2:30 PM``."""
    date_part = format_date(due_date)
    if not date_part:
        return ""
    time_part = format_time(due_time)
    return f"{date_part} at {time_part}" if time_part else date_part


def format_time_block(start: str | time | None, end: str | time | None) -> str:
    """``09:00``-``10:30`` -> ``9:00 AM - 10:30 AM``."""
    start_part = format_time(start)
    if not start_part:
        return ""
    end_part = format_time(end)
    return f"{start_part} - {end_part}" if end_part else start_part
