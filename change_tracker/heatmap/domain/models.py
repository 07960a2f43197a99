from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Final, Literal


class EventType(str, Enum):
    ADD = "add"
    CHANGE = "change"
    DELETE = "delete"


# Fixed priority order; decides which color sits where in split cells.
EVENT_TYPE_ORDER: Final[tuple[EventType, ...]] = (
    EventType.ADD,
    EventType.CHANGE,
    EventType.DELETE,
)

Period = Literal[1, 3, 6, 12]
SUPPORTED_PERIODS: Final[tuple[int, ...]] = (1, 3, 6, 12)


def validate_period(value: int) -> int:
    if value not in SUPPORTED_PERIODS:
        raise ValueError(f"period must be one of {SUPPORTED_PERIODS}, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class ChangeEvent:
    """A single add/change/delete action recorded against the registry."""

    id: str
    timestamp: datetime
    type: EventType
    message: str = ""


@dataclass(frozen=True)
class EventFilters:
    add: bool = True
    change: bool = True
    delete: bool = True

    def enabled(self, event_type: EventType) -> bool:
        return bool(getattr(self, event_type.value))


@dataclass(frozen=True)
class DayCell:
    date: date
    weekday_index: int  # 0=Sun ... 6=Sat
    week_index: int
    add: tuple[ChangeEvent, ...] = ()
    change: tuple[ChangeEvent, ...] = ()
    delete: tuple[ChangeEvent, ...] = ()

    def bucket(self, event_type: EventType) -> tuple[ChangeEvent, ...]:
        return getattr(self, event_type.value)

    @property
    def total(self) -> int:
        return len(self.add) + len(self.change) + len(self.delete)

    @property
    def is_empty(self) -> bool:
        return self.total == 0


@dataclass(frozen=True)
class CalendarWindow:
    start: date
    end: date
    week_count: int


@dataclass(frozen=True)
class CalendarGrid:
    """Dense day-by-day model of one window, ascending by date."""

    cells: tuple[DayCell, ...]
    window: CalendarWindow
    dropped_count: int = 0

    def cell_for(self, day: date) -> DayCell | None:
        if not self.cells or day < self.window.start or day > self.window.end:
            return None
        return self.cells[(day - self.window.start).days]


@dataclass(frozen=True)
class GridGeometry:
    cell_size_px: int
    cell_padding_px: float
    axis_label_width_px: float
    axis_label_height_px: float
    total_width_px: float
    total_height_px: float
    font_size_px: float

    @property
    def stride_px(self) -> float:
        return self.cell_size_px + self.cell_padding_px

    @property
    def border_radius_px(self) -> float:
        return max(2.0, self.cell_size_px * 0.125)

    def cell_origin(self, week_index: int, weekday_index: int) -> tuple[float, float]:
        x = self.axis_label_width_px + week_index * self.stride_px
        y = self.axis_label_height_px + weekday_index * self.stride_px
        return x, y
