"""Time source abstraction.

All recurrence and maintenance decisions take "now" from a ``Clock`` so the
calendar-day rules can be exercised deterministically. Calendar days are
evaluated in the clock's zone, which is the user's configured zone (client-local
semantics), never a fixed server zone.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import tzlocal


class Clock(Protocol):
    """Supplies the current instant and the zone used for calendar days."""

    @property
    def tz(self) -> tzinfo: ...

    def now(self) -> datetime: ...


def resolve_timezone(name: str | None) -> tzinfo:
    """Resolve a configured zone name, falling back to the machine's zone."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return tzlocal.get_localzone()


class SystemClock:
    """Wall clock in a given zone."""

    def __init__(self, tz: tzinfo | str | None = None):
        self._tz = tz if isinstance(tz, tzinfo) else resolve_timezone(tz)

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock:
    """Manually driven clock for tests and dry runs."""

    def __init__(self, current: datetime, tz: tzinfo | None = None):
        if current.tzinfo is None:
            if tz is None:
                raise ValueError("FixedClock needs an aware datetime or an explicit tz")
            current = current.replace(tzinfo=tz)
        self._tz = tz or current.tzinfo
        self._now = current

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def now(self) -> datetime:
        return self._now

    def set(self, current: datetime) -> None:
        if current.tzinfo is None:
            current = current.replace(tzinfo=self._tz)
        self._now = current

    def advance(self, **delta: float) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now


def local_date(instant: datetime, tz: tzinfo | None = None) -> date:
    """Calendar date of *instant* in *tz* (or the instant's own zone)."""
    if tz is not None and instant.tzinfo is not None:
        instant = instant.astimezone(tz)
    return instant.date()

