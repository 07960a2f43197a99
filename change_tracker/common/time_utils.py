from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, tzinfo


def parse_iso8601(dt_str: str) -> datetime:
    # Registry exports use e.g. 2025-01-02T09:12:00Z
    if dt_str.endswith("Z"):
        dt_str = dt_str[:-1] + "+00:00"
    return datetime.fromisoformat(dt_str)


def local_date(value: datetime | date, tz: tzinfo | None = None) -> date:
    """Normalize a point in time to its local calendar day (midnight).

    Aware datetimes are converted to ``tz`` first (system local zone when
    ``tz`` is None). Naive datetimes are taken as already local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def subtract_months(day: date, months: int) -> date:
    """Step back whole calendar months, clamping to the target month's last day."""
    idx = day.year * 12 + (day.month - 1) - months
    year, month = divmod(idx, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def sunday_index(day: date) -> int:
    # 0=Sun ... 6=Sat
    return (day.weekday() + 1) % 7


def sunday_on_or_before(day: date) -> date:
    return day - timedelta(days=sunday_index(day))
