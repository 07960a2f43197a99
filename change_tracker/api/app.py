from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Sequence

from fastapi import FastAPI, HTTPException, Query, Response
from pydantic import BaseModel

from change_tracker.heatmap.bucketing import build_calendar
from change_tracker.heatmap.domain.models import (
    SUPPORTED_PERIODS,
    ChangeEvent,
    EventFilters,
    validate_period,
)
from change_tracker.heatmap.geometry import compute_geometry
from change_tracker.heatmap.rendering import active_types, render_svg
from change_tracker.heatmap.tooltip import tooltip_text


EventsProvider = Callable[[], Sequence[ChangeEvent]]


class DayCounts(BaseModel):
    day: date
    weekday_index: int
    week_index: int
    add: int
    change: int
    delete: int


class CalendarResponse(BaseModel):
    period: int
    start: date
    end: date
    week_count: int
    dropped_count: int
    days: list[DayCounts]


class TooltipResponse(BaseModel):
    day: date
    content: str
    active_types: list[str]


def _period(period: int) -> int:
    try:
        return validate_period(period)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def create_app(
    events_provider: EventsProvider,
    now_provider: Callable[[], datetime] = datetime.now,
) -> FastAPI:
    app = FastAPI(title="Change Tracker")
    period_help = f"Trailing window in months, one of {SUPPORTED_PERIODS}"

    @app.get("/heatmap.svg")
    def heatmap_svg(
        period: int = Query(12, description=period_help),
        width: float = Query(1000.0, ge=0, le=10000),
        add: bool = True,
        change: bool = True,
        delete: bool = True,
    ) -> Response:
        grid = build_calendar(events_provider(), _period(period), now_provider())
        geometry = compute_geometry(width, grid.window.week_count)
        svg = render_svg(grid, geometry, EventFilters(add=add, change=change, delete=delete))
        return Response(content=svg, media_type="image/svg+xml")

    @app.get("/calendar", response_model=CalendarResponse)
    def calendar(period: int = Query(12, description=period_help)) -> CalendarResponse:
        p = _period(period)
        grid = build_calendar(events_provider(), p, now_provider())
        return CalendarResponse(
            period=p,
            start=grid.window.start,
            end=grid.window.end,
            week_count=grid.window.week_count,
            dropped_count=grid.dropped_count,
            days=[
                DayCounts(
                    day=c.date,
                    weekday_index=c.weekday_index,
                    week_index=c.week_index,
                    add=len(c.add),
                    change=len(c.change),
                    delete=len(c.delete),
                )
                for c in grid.cells
            ],
        )

    @app.get("/tooltip/{day}", response_model=TooltipResponse)
    def tooltip(day: date, period: int = Query(12, description=period_help)) -> TooltipResponse:
        grid = build_calendar(events_provider(), _period(period), now_provider())
        cell = grid.cell_for(day)
        if cell is None:
            raise HTTPException(
                status_code=404,
                detail=f"{day} is outside {grid.window.start}..{grid.window.end}",
            )
        return TooltipResponse(
            day=day,
            content=tooltip_text(cell),
            active_types=[t.value for t in active_types(cell, EventFilters())],
        )

    return app
