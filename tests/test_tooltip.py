from __future__ import annotations

from datetime import date, datetime

from change_tracker.heatmap.domain.models import ChangeEvent, DayCell, EventType
from change_tracker.heatmap.tooltip import TooltipState, format_day_header, tooltip_text


def _ev(event_id: str, event_type: EventType, message: str) -> ChangeEvent:
    return ChangeEvent(id=event_id, timestamp=datetime(2025, 3, 15, 10, 0), type=event_type, message=message)


def test_day_header_format() -> None:
    assert format_day_header(date(2025, 3, 15)) == "Sat, Mar 15"
    assert format_day_header(date(2025, 2, 9)) == "Sun, Feb 9"


def test_added_only_with_empty_message_fallback() -> None:
    cell = DayCell(
        date=date(2025, 3, 15),
        weekday_index=6,
        week_index=4,
        add=(_ev("1", EventType.ADD, "X"), _ev("2", EventType.ADD, "")),
    )

    text = tooltip_text(cell)

    assert text.split("\n") == [
        "Sat, Mar 15",
        "",
        "Added (2):",
        "  • X",
        "  • No message",
    ]
    assert "Changed" not in text
    assert "Deleted" not in text


def test_sections_separated_by_blank_lines() -> None:
    cell = DayCell(
        date=date(2025, 3, 15),
        weekday_index=6,
        week_index=4,
        add=(_ev("1", EventType.ADD, "Namespace 'ns-alpha' created"),),
        change=(_ev("2", EventType.CHANGE, "Visibility changed"),),
        delete=(_ev("3", EventType.DELETE, "Repository deleted"), _ev("4", EventType.DELETE, "Tag pruned")),
    )

    assert tooltip_text(cell) == "\n".join(
        [
            "Sat, Mar 15",
            "",
            "Added (1):",
            "  • Namespace 'ns-alpha' created",
            "",
            "Changed (1):",
            "  • Visibility changed",
            "",
            "Deleted (2):",
            "  • Repository deleted",
            "  • Tag pruned",
        ]
    )


def test_change_and_delete_without_additions() -> None:
    cell = DayCell(
        date=date(2025, 3, 15),
        weekday_index=6,
        week_index=4,
        change=(_ev("2", EventType.CHANGE, "c"),),
        delete=(_ev("3", EventType.DELETE, "d"),),
    )

    assert tooltip_text(cell).split("\n") == [
        "Sat, Mar 15",
        "",
        "Changed (1):",
        "  • c",
        "",
        "Deleted (1):",
        "  • d",
    ]


def test_no_activity() -> None:
    cell = DayCell(date=date(2025, 3, 15), weekday_index=6, week_index=4)

    assert tooltip_text(cell) == "Sat, Mar 15\n\nNo activity"


def test_tooltip_anchored_above_cell_centre() -> None:
    state = TooltipState.anchored(37.5, 28.125, 15, "hello")

    assert state.visible
    assert (state.x, state.y) == (45, 18)
    assert state.content == "hello"
    assert TooltipState.hidden() == TooltipState(visible=False, x=0, y=0, content="")
