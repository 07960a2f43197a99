from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import date
from typing import Final

from change_tracker.heatmap.domain.models import (
    EVENT_TYPE_ORDER,
    CalendarGrid,
    DayCell,
    EventFilters,
    EventType,
    GridGeometry,
)
from change_tracker.heatmap.tooltip import MONTH_LABELS, WEEKDAY_LABELS, tooltip_text


SVG_NS: Final[str] = "http://www.w3.org/2000/svg"

NEUTRAL_COLOR: Final[str] = "#e5e7eb"
TYPE_COLORS: Final[dict[EventType, str]] = {
    EventType.DELETE: "#ef4444",
    EventType.ADD: "#36a288",
    EventType.CHANGE: "#eab308",
}
LABEL_COLOR: Final[str] = "#666"
BORDER_COLOR: Final[str] = "#e5e7eb"
HOVER_BORDER_COLOR: Final[str] = "#14b8a6"
MONTH_LABEL_Y: Final[int] = 15
DAY_LABEL_GAP: Final[int] = 10

ET.register_namespace("", SVG_NS)


@dataclass(frozen=True)
class Segment:
    """One filled rectangle of a (possibly split) cell."""

    x: float
    y: float
    width: float
    height: float
    fill: str


def color_for(event_type: EventType | None) -> str:
    if event_type is None:
        return NEUTRAL_COLOR
    return TYPE_COLORS.get(event_type, NEUTRAL_COLOR)


def active_types(cell: DayCell, filters: EventFilters) -> tuple[EventType, ...]:
    return tuple(t for t in EVENT_TYPE_ORDER if cell.bucket(t) and filters.enabled(t))


def cell_segments(
    cell: DayCell,
    filters: EventFilters,
    x: float,
    y: float,
    size: float,
) -> tuple[Segment, ...]:
    types = active_types(cell, filters)
    half = size / 2

    if not types:
        return (Segment(x, y, size, size, NEUTRAL_COLOR),)
    if len(types) == 1:
        return (Segment(x, y, size, size, color_for(types[0])),)
    if len(types) == 2:
        return (
            Segment(x, y, size, half, color_for(types[0])),
            Segment(x, y + half, size, half, color_for(types[1])),
        )
    # add | change on top, delete across the bottom
    return (
        Segment(x, y, half, half, color_for(EventType.ADD)),
        Segment(x + half, y, half, half, color_for(EventType.CHANGE)),
        Segment(x, y + half, size, half, color_for(EventType.DELETE)),
    )


def month_label_positions(grid: CalendarGrid) -> list[tuple[str, int]]:
    """(label, week_index) per month, placed at the month's middle cell."""
    by_month: dict[tuple[int, int], list[DayCell]] = {}
    for cell in grid.cells:
        by_month.setdefault((cell.date.year, cell.date.month), []).append(cell)

    out: list[tuple[str, int]] = []
    for (_, month), cells in by_month.items():
        selected = cells[len(cells) // 2]
        out.append((MONTH_LABELS[month - 1].upper(), selected.week_index))
    return out


def _num(value: float) -> str:
    return ("%.3f" % value).rstrip("0").rstrip(".")


def _tag(name: str) -> str:
    return f"{{{SVG_NS}}}{name}"


def _rect(parent: ET.Element, x: float, y: float, w: float, h: float, **attrs: str) -> ET.Element:
    el = ET.SubElement(parent, _tag("rect"))
    el.set("x", _num(x))
    el.set("y", _num(y))
    el.set("width", _num(w))
    el.set("height", _num(h))
    for key, value in attrs.items():
        el.set(key.replace("_", "-"), value)
    return el


def render_svg(
    grid: CalendarGrid,
    geometry: GridGeometry,
    filters: EventFilters,
    hovered: date | None = None,
) -> str:
    """Render the whole heatmap as a standalone SVG document.

    The document is rebuilt from scratch on every call.
    """
    size = geometry.cell_size_px
    stride = geometry.stride_px
    radius = _num(geometry.border_radius_px)
    font_size = f"{_num(geometry.font_size_px)}px"

    svg = ET.Element(_tag("svg"))
    svg.set("width", _num(geometry.total_width_px))
    svg.set("height", _num(geometry.total_height_px))
    svg.set("viewBox", f"0 0 {_num(geometry.total_width_px)} {_num(geometry.total_height_px)}")

    months = ET.SubElement(svg, _tag("g"), {"class": "month-labels"})
    for label, week_index in month_label_positions(grid):
        text = ET.SubElement(months, _tag("text"))
        text.set("x", _num(geometry.axis_label_width_px + week_index * stride))
        text.set("y", str(MONTH_LABEL_Y))
        text.set("font-size", font_size)
        text.set("fill", LABEL_COLOR)
        text.set("text-anchor", "start")
        text.text = label

    days = ET.SubElement(svg, _tag("g"), {"class": "day-labels"})
    for i, label in enumerate(WEEKDAY_LABELS):
        text = ET.SubElement(days, _tag("text"))
        text.set("x", _num(geometry.axis_label_width_px - DAY_LABEL_GAP))
        text.set("y", _num(geometry.axis_label_height_px + i * stride + size - 2))
        text.set("font-size", font_size)
        text.set("fill", LABEL_COLOR)
        text.set("text-anchor", "end")
        text.text = label

    cells = ET.SubElement(svg, _tag("g"), {"class": "cells"})
    for cell in grid.cells:
        x, y = geometry.cell_origin(cell.week_index, cell.weekday_index)
        group = ET.SubElement(
            cells,
            _tag("g"),
            {"class": "cell-group", "data-date": cell.date.isoformat(), "style": "cursor: pointer"},
        )
        for seg in cell_segments(cell, filters, x, y, size):
            _rect(
                group,
                seg.x,
                seg.y,
                seg.width,
                seg.height,
                fill=seg.fill,
                stroke=BORDER_COLOR,
                stroke_width="0.5",
                rx=radius,
            )

        is_hovered = hovered is not None and cell.date == hovered
        overlay = _rect(
            group,
            x,
            y,
            size,
            size,
            fill="transparent",
            stroke=HOVER_BORDER_COLOR if is_hovered else BORDER_COLOR,
            stroke_width="2" if is_hovered else "0.5",
            rx=radius,
        )
        overlay.set("class", "cell-overlay")
        title = ET.SubElement(group, _tag("title"))
        title.text = tooltip_text(cell)

    return ET.tostring(svg, encoding="unicode")
