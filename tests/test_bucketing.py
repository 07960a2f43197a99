from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from change_tracker.heatmap.bucketing import build_calendar, compute_window
from change_tracker.heatmap.domain.models import ChangeEvent, EventType


def _ev(event_id: str, ts: datetime, event_type: EventType, message: str = "") -> ChangeEvent:
    return ChangeEvent(id=event_id, timestamp=ts, type=event_type, message=message)


NOWS = (
    datetime(2025, 3, 15, 12, 0),
    datetime(2025, 3, 31, 23, 59),
    datetime(2024, 2, 29, 0, 0),
    datetime(2025, 1, 1, 8, 30),
    datetime(2024, 12, 31, 18, 0),
    datetime(2026, 10, 19, 9, 0),
)


@pytest.mark.parametrize("period", [1, 3, 6, 12])
@pytest.mark.parametrize("now", NOWS)
def test_cells_cover_window_without_gaps(period: int, now: datetime) -> None:
    grid = build_calendar([], period, now)
    days = [c.date for c in grid.cells]

    assert days[0] == grid.window.start
    assert days[-1] == grid.window.end == now.date()
    assert len(days) == (grid.window.end - grid.window.start).days + 1
    assert len(set(days)) == len(days)
    assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))


@pytest.mark.parametrize("period", [1, 3, 6, 12])
@pytest.mark.parametrize("now", NOWS)
def test_window_starts_on_sunday(period: int, now: datetime) -> None:
    grid = build_calendar([], period, now)

    assert grid.window.start.weekday() == 6
    assert grid.cells[0].weekday_index == 0
    for i, cell in enumerate(grid.cells):
        assert cell.week_index == i // 7
        assert cell.weekday_index == i % 7
    assert grid.window.week_count == grid.cells[-1].week_index + 1


def test_empty_events_one_month_scenario() -> None:
    calls: list[tuple[date, date]] = []

    grid = build_calendar([], 1, datetime(2025, 3, 15, 12, 0), on_period_change=lambda s, e: calls.append((s, e)))

    # 2025-02-15 is a Saturday; the window rolls back to Sunday 2025-02-09.
    assert grid.window.start == date(2025, 2, 9)
    assert grid.window.end == date(2025, 3, 15)
    assert len(grid.cells) == 35
    assert grid.window.week_count == 5
    assert all(c.is_empty for c in grid.cells)
    assert calls == [(date(2025, 2, 9), date(2025, 3, 15))]


def test_month_subtraction_clamps_to_month_end() -> None:
    window = compute_window(1, date(2025, 3, 31))

    # 2025-03-31 minus one month is 2025-02-28 (a Friday).
    assert window.start == date(2025, 2, 23)


def test_events_land_in_matching_bucket_or_are_dropped() -> None:
    now = datetime(2025, 3, 15, 12, 0)
    events = [
        _ev("1", datetime(2025, 3, 1, 9, 0), EventType.ADD, "ns created"),
        _ev("2", datetime(2025, 3, 1, 17, 30), EventType.ADD, "repo created"),
        _ev("3", datetime(2025, 3, 1, 18, 0), EventType.DELETE, "repo deleted"),
        _ev("4", datetime(2025, 3, 15, 23, 59), EventType.CHANGE, "visibility changed"),
        _ev("5", datetime(2025, 2, 9, 0, 0), EventType.CHANGE, "first day"),
        _ev("6", datetime(2025, 2, 8, 23, 59), EventType.ADD, "too old"),
        _ev("7", datetime(2025, 3, 16, 0, 0), EventType.DELETE, "in the future"),
    ]

    grid = build_calendar(events, 1, now)

    first = grid.cell_for(date(2025, 3, 1))
    assert first is not None
    assert [e.id for e in first.add] == ["1", "2"]
    assert [e.id for e in first.delete] == ["3"]
    assert first.change == ()

    last = grid.cell_for(date(2025, 3, 15))
    assert last is not None and [e.id for e in last.change] == ["4"]

    opening = grid.cell_for(date(2025, 2, 9))
    assert opening is not None and [e.id for e in opening.change] == ["5"]

    counted = [e.id for c in grid.cells for t in EventType for e in c.bucket(t)]
    assert sorted(counted) == ["1", "2", "3", "4", "5"]
    assert grid.dropped_count == 2


def test_aware_timestamps_use_local_day() -> None:
    plus_two = timezone(timedelta(hours=2))
    event = _ev("1", datetime(2025, 3, 10, 23, 30, tzinfo=timezone.utc), EventType.ADD)

    grid = build_calendar([event], 1, date(2025, 3, 15), tz=plus_two)

    shifted = grid.cell_for(date(2025, 3, 11))
    assert shifted is not None and len(shifted.add) == 1
    original = grid.cell_for(date(2025, 3, 10))
    assert original is not None and original.is_empty


def test_build_calendar_is_idempotent() -> None:
    now = datetime(2025, 6, 1, 10, 0)
    events = [
        _ev(str(i), now - timedelta(days=i * 3, hours=i), (EventType.ADD, EventType.CHANGE, EventType.DELETE)[i % 3])
        for i in range(40)
    ]

    first = build_calendar(events, 3, now)
    second = build_calendar(events, 3, now)

    assert first == second
