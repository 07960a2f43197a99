from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, Iterable, Iterator

from change_tracker.heatmap.bucketing import PeriodChangeCallback, build_calendar
from change_tracker.heatmap.domain.models import (
    CalendarGrid,
    ChangeEvent,
    EventFilters,
    GridGeometry,
)
from change_tracker.heatmap.geometry import compute_geometry
from change_tracker.heatmap.rendering import render_svg
from change_tracker.heatmap.tooltip import TooltipState, tooltip_text
from change_tracker.integration.event_bus import EventBus
from change_tracker.integration.events import (
    ActivityWindowComputed,
    ContainerResized,
    WindowResized,
)


logger = logging.getLogger(__name__)

DEFAULT_CONTAINER_WIDTH = 1000.0


@dataclass
class ChangeTrackerView:
    """Stateful heatmap view: memoized recomputation, resize tracking, hover.

    Callers feed inputs through ``update`` on every render. The calendar is
    rebuilt (and the period notifier fired) only when the events, the period
    or the notifier identity change, so callers must pass the same notifier
    object across renders.

    Container width follows ``ContainerResized`` for the mounted container.
    ``WindowResized`` only triggers a remeasure through ``measure`` and is
    ignored when no callback is given.
    """

    bus: EventBus
    container_width: float = DEFAULT_CONTAINER_WIDTH
    measure: Callable[[], float] | None = None
    now_provider: Callable[[], datetime] = datetime.now
    tz: tzinfo | None = None

    tooltip: TooltipState = field(default_factory=TooltipState.hidden)
    hovered: date | None = None

    _events: tuple[ChangeEvent, ...] = ()
    _filters: EventFilters = field(default_factory=EventFilters)
    _period: int = 12
    _on_period_change: PeriodChangeCallback | None = None
    _grid: CalendarGrid | None = None
    _geometry: GridGeometry | None = None
    _geometry_key: tuple[float, int] | None = None
    _container_id: str | None = None

    # --- Inputs -------------------------------------------------------------

    def update(
        self,
        events: Iterable[ChangeEvent],
        filters: EventFilters,
        period: int,
        on_period_change: PeriodChangeCallback | None = None,
    ) -> None:
        events = tuple(events)
        stale = (
            self._grid is None
            or events != self._events
            or period != self._period
            or on_period_change is not self._on_period_change
        )
        previous = (self._events, self._period, self._on_period_change)
        self._events = events
        self._filters = filters
        self._period = period
        self._on_period_change = on_period_change
        if not stale:
            return
        try:
            self._recompute()
        except Exception:
            # Keep the inputs paired with the grid still held, so a retry rebuilds.
            self._events, self._period, self._on_period_change = previous
            raise

    def _recompute(self) -> None:
        grid = build_calendar(
            self._events,
            self._period,
            self.now_provider(),
            on_period_change=self._on_period_change,
            tz=self.tz,
        )
        self._grid = grid
        if self.hovered is not None and grid.cell_for(self.hovered) is None:
            self.leave()

        logger.debug(
            "Recomputed %d-month window %s..%s (%d cells)",
            self._period,
            grid.window.start,
            grid.window.end,
            len(grid.cells),
        )
        self.bus.publish(
            ActivityWindowComputed(
                occurred_at=datetime.now(timezone.utc),
                start=grid.window.start,
                end=grid.window.end,
                period=self._period,
                event_count=len(self._events),
                dropped_count=grid.dropped_count,
            )
        )

    # --- Derived state ------------------------------------------------------

    @property
    def grid(self) -> CalendarGrid:
        if self._grid is None:
            raise RuntimeError("update() must be called before the grid is available")
        return self._grid

    @property
    def filters(self) -> EventFilters:
        return self._filters

    @property
    def geometry(self) -> GridGeometry:
        key = (float(self.container_width), self.grid.window.week_count)
        if self._geometry is None or key != self._geometry_key:
            self._geometry = compute_geometry(*key)
            self._geometry_key = key
        return self._geometry

    def render(self) -> str:
        return render_svg(self.grid, self.geometry, self._filters, hovered=self.hovered)

    # --- Resize observation -------------------------------------------------

    @property
    def mounted_container(self) -> str | None:
        return self._container_id

    def mount(self, container_id: str) -> None:
        if self._container_id == container_id:
            return
        if self._container_id is not None:
            self.unmount()
        self._container_id = container_id
        self.bus.subscribe(ContainerResized, self._on_container_resized)
        self.bus.subscribe(WindowResized, self._on_window_resized)
        self._remeasure()

    def unmount(self) -> None:
        if self._container_id is None:
            return
        self.bus.unsubscribe(ContainerResized, self._on_container_resized)
        self.bus.unsubscribe(WindowResized, self._on_window_resized)
        self._container_id = None
        self.leave()

    @contextmanager
    def mounted(self, container_id: str) -> Iterator["ChangeTrackerView"]:
        self.mount(container_id)
        try:
            yield self
        finally:
            self.unmount()

    def _remeasure(self) -> None:
        if self.measure is not None:
            self.container_width = float(self.measure())

    def _on_container_resized(self, e: ContainerResized) -> None:
        if e.container_id != self._container_id:
            return
        self.container_width = float(e.width_px)

    def _on_window_resized(self, e: WindowResized) -> None:
        # Without a measure callback the window width says nothing about the container.
        if self.measure is None:
            return
        self._remeasure()

    # --- Hover --------------------------------------------------------------

    def hover(self, day: date) -> TooltipState:
        cell = self.grid.cell_for(day)
        if cell is None:
            return self.tooltip
        geo = self.geometry
        x, y = geo.cell_origin(cell.week_index, cell.weekday_index)
        self.hovered = day
        self.tooltip = TooltipState.anchored(x, y, geo.cell_size_px, tooltip_text(cell))
        return self.tooltip

    def leave(self) -> None:
        self.hovered = None
        self.tooltip = TooltipState.hidden()
