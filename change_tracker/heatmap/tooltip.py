from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Final

from change_tracker.common.time_utils import sunday_index
from change_tracker.heatmap.domain.models import EVENT_TYPE_ORDER, DayCell, EventType


WEEKDAY_LABELS: Final[tuple[str, ...]] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTH_LABELS: Final[tuple[str, ...]] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

SECTION_TITLES: Final[dict[EventType, str]] = {
    EventType.ADD: "Added",
    EventType.CHANGE: "Changed",
    EventType.DELETE: "Deleted",
}
EMPTY_MESSAGE: Final[str] = "No message"
NO_ACTIVITY: Final[str] = "No activity"
TOOLTIP_OFFSET_PX: Final[int] = 10


def format_day_header(day: date) -> str:
    """Format as 'Sat, Mar 15' regardless of process locale."""
    return f"{WEEKDAY_LABELS[sunday_index(day)]}, {MONTH_LABELS[day.month - 1]} {day.day}"


def tooltip_text(cell: DayCell) -> str:
    parts = [format_day_header(cell.date), ""]
    sections = 0
    for event_type in EVENT_TYPE_ORDER:
        bucket = cell.bucket(event_type)
        if not bucket:
            continue
        if sections:
            parts.append("")
        parts.append(f"{SECTION_TITLES[event_type]} ({len(bucket)}):")
        parts.extend(f"  • {e.message or EMPTY_MESSAGE}" for e in bucket)
        sections += 1

    if not sections:
        parts.append(NO_ACTIVITY)
    return "\n".join(parts)


@dataclass(frozen=True)
class TooltipState:
    """Transient hover state owned by the view; cleared on pointer-leave."""

    visible: bool = False
    x: int = 0
    y: int = 0
    content: str = ""

    @classmethod
    def hidden(cls) -> "TooltipState":
        return cls()

    @classmethod
    def anchored(cls, cell_x: float, cell_y: float, size: float, content: str) -> "TooltipState":
        # Horizontally centred, just above the cell.
        return cls(
            visible=True,
            x=round(cell_x + size / 2),
            y=round(cell_y - TOOLTIP_OFFSET_PX),
            content=content,
        )
