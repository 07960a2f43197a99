from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Iterable

from change_tracker.common.time_utils import (
    local_date,
    subtract_months,
    sunday_index,
    sunday_on_or_before,
)
from change_tracker.heatmap.domain.models import (
    CalendarGrid,
    CalendarWindow,
    ChangeEvent,
    DayCell,
    EventType,
)


logger = logging.getLogger(__name__)

PeriodChangeCallback = Callable[[date, date], None]


def compute_window(period: int, now: datetime | date, tz: tzinfo | None = None) -> CalendarWindow:
    """Trailing window of ``period`` months ending today, starting on a Sunday."""
    end = local_date(now, tz)
    start = sunday_on_or_before(subtract_months(end, period))
    week_count = (end - start).days // 7 + 1
    return CalendarWindow(start=start, end=end, week_count=week_count)


def build_calendar(
    events: Iterable[ChangeEvent],
    period: int,
    now: datetime | date,
    on_period_change: PeriodChangeCallback | None = None,
    tz: tzinfo | None = None,
) -> CalendarGrid:
    """Bucket events into one cell per day of the trailing window.

    Events whose local date falls outside the window are dropped, not
    rejected. ``on_period_change`` is called once with (start, end).
    """
    window = compute_window(period, now, tz)

    buckets: dict[date, dict[EventType, list[ChangeEvent]]] = defaultdict(
        lambda: {t: [] for t in EventType}
    )
    dropped = 0
    for event in events:
        day = local_date(event.timestamp, tz)
        if day < window.start or day > window.end:
            dropped += 1
            continue
        buckets[day][EventType(event.type)].append(event)

    cells: list[DayCell] = []
    n_days = (window.end - window.start).days + 1
    for offset in range(n_days):
        day = window.start + timedelta(days=offset)
        by_type = buckets.get(day)
        cells.append(
            DayCell(
                date=day,
                weekday_index=sunday_index(day),
                week_index=offset // 7,
                add=tuple(by_type[EventType.ADD]) if by_type else (),
                change=tuple(by_type[EventType.CHANGE]) if by_type else (),
                delete=tuple(by_type[EventType.DELETE]) if by_type else (),
            )
        )

    if dropped:
        logger.debug(
            "Dropped %d event(s) outside window %s..%s", dropped, window.start, window.end
        )

    if on_period_change is not None:
        on_period_change(window.start, window.end)

    return CalendarGrid(cells=tuple(cells), window=window, dropped_count=dropped)
