# gachabot/utils/dates.py
from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

UTC = timezone.utc


def utc_now() -> datetime:
    return datetime.now(UTC)


def resolve_tz(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return UTC
    return ZoneInfo(name)


def calendar_day(instant: datetime, tz: tzinfo = UTC) -> date:
    # naive -> UTC, same rule as stored instants
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    return instant.astimezone(tz).date()


def days_between(earlier: datetime, later: datetime, tz: tzinfo = UTC) -> int:
    """Calendar days from `earlier` to `later` in `tz` (negative if `later` is before)."""
    return (calendar_day(later, tz) - calendar_day(earlier, tz)).days


def is_same_day(a: datetime, b: datetime, tz: tzinfo = UTC) -> bool:
    return calendar_day(a, tz) == calendar_day(b, tz)
