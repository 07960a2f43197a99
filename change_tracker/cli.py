from __future__ import annotations

import logging
import math
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from change_tracker.adapters.event_loader import EventsFileError, dump_events, load_events
from change_tracker.common.config import EXAMPLE_CONFIG, ChangeTrackerConfig
from change_tracker.common.logging_config import configure_logging
from change_tracker.heatmap.bucketing import build_calendar
from change_tracker.heatmap.domain.models import (
    EVENT_TYPE_ORDER,
    CalendarGrid,
    ChangeEvent,
    EventFilters,
    validate_period,
)
from change_tracker.heatmap.tooltip import MONTH_LABELS, tooltip_text
from change_tracker.heatmap.view import ChangeTrackerView
from change_tracker.integration.event_bus import InMemoryEventBus
from change_tracker.io.synthetic import SyntheticConfig, generate_synthetic_events


app = typer.Typer(add_completion=False)
logger = logging.getLogger(__name__)


def _load_config(config: Optional[str]) -> ChangeTrackerConfig:
    if not config:
        return ChangeTrackerConfig()
    path = Path(config).expanduser()
    if not path.exists():
        raise typer.BadParameter(f"Config file not found: {path}")
    return ChangeTrackerConfig.load(path)


def _resolve_events(events: Optional[str], cfg: ChangeTrackerConfig) -> list[ChangeEvent]:
    path = Path(events).expanduser() if events else cfg.input.resolve()
    if path is None:
        raise typer.BadParameter("No events file given (use --events or [input].events_path)")
    if not path.exists():
        raise typer.BadParameter(f"Events file not found: {path}")
    try:
        return load_events(path)
    except EventsFileError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _check_period(period: int) -> int:
    try:
        return validate_period(period)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _check_width(width: float) -> float:
    if not math.isfinite(width) or width < 0:
        raise typer.BadParameter(f"Width must be a finite number >= 0, got {width}")
    return width


def _log_window(start: date, end: date) -> None:
    logger.info("Active window: %s .. %s", start, end)


def _render_to(
    events: list[ChangeEvent],
    filters: EventFilters,
    period: int,
    width: float,
    out: Path,
) -> CalendarGrid:
    view = ChangeTrackerView(bus=InMemoryEventBus(), container_width=width)
    view.update(events, filters, period, _log_window)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(view.render(), encoding="utf-8")
    return view.grid


@app.command()
def render(
    events: Optional[str] = typer.Option(None, help="Path to events JSON"),
    config: Optional[str] = typer.Option(None, help="Path to change_tracker.toml"),
    period: Optional[int] = typer.Option(None, help="Trailing months: 1 | 3 | 6 | 12"),
    width: Optional[float] = typer.Option(None, min=0, help="Container width in px"),
    add: Optional[bool] = typer.Option(None, "--add/--no-add", help="Show additions"),
    change: Optional[bool] = typer.Option(None, "--change/--no-change", help="Show changes"),
    delete: Optional[bool] = typer.Option(None, "--delete/--no-delete", help="Show deletions"),
    out: Optional[str] = typer.Option(None, help="Where to write the SVG"),
) -> None:
    """Render an activity heatmap SVG from an events file."""
    cfg = _load_config(config)
    configure_logging(cfg.logging.level, log_dir=cfg.logging.log_dir)

    evts = _resolve_events(events, cfg)
    p = _check_period(period if period is not None else cfg.heatmap.period)
    w = _check_width(width if width is not None else cfg.heatmap.container_width)
    overrides = {"add": add, "change": change, "delete": delete}
    filters = cfg.filters.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    ).to_filters()
    out_path = Path(out).expanduser() if out else cfg.output.resolve()

    grid = _render_to(evts, filters, p, w, out_path)
    typer.echo(
        f"Wrote {out_path} ({grid.window.start} .. {grid.window.end}, "
        f"{grid.window.week_count} weeks, {grid.dropped_count} event(s) outside window)"
    )


@app.command()
def summary(
    events: Optional[str] = typer.Option(None, help="Path to events JSON"),
    config: Optional[str] = typer.Option(None, help="Path to change_tracker.toml"),
    period: Optional[int] = typer.Option(None, help="Trailing months: 1 | 3 | 6 | 12"),
) -> None:
    """Print monthly add/change/delete counts for the window."""
    cfg = _load_config(config)
    configure_logging(cfg.logging.level, log_dir=cfg.logging.log_dir)
    evts = _resolve_events(events, cfg)
    p = _check_period(period if period is not None else cfg.heatmap.period)

    grid = build_calendar(evts, p, datetime.now())

    rows: dict[tuple[int, int], list[int]] = {}
    for cell in grid.cells:
        counts = rows.setdefault((cell.date.year, cell.date.month), [0, 0, 0])
        for i, t in enumerate(EVENT_TYPE_ORDER):
            counts[i] += len(cell.bucket(t))

    table = Table(title=f"Activity {grid.window.start} .. {grid.window.end}")
    table.add_column("Month")
    table.add_column("Added", justify="right", style="green")
    table.add_column("Changed", justify="right", style="yellow")
    table.add_column("Deleted", justify="right", style="red")
    for (year, month), (n_add, n_change, n_delete) in rows.items():
        table.add_row(f"{MONTH_LABELS[month - 1]} {year}", str(n_add), str(n_change), str(n_delete))

    console = Console()
    console.print(table)
    if grid.dropped_count:
        console.print(f"{grid.dropped_count} event(s) fell outside the window")


@app.command()
def tooltip(
    day: str = typer.Argument(..., help="Day as YYYY-MM-DD"),
    events: Optional[str] = typer.Option(None, help="Path to events JSON"),
    config: Optional[str] = typer.Option(None, help="Path to change_tracker.toml"),
    period: Optional[int] = typer.Option(None, help="Trailing months: 1 | 3 | 6 | 12"),
) -> None:
    """Print the hover text for one day of the heatmap."""
    cfg = _load_config(config)
    evts = _resolve_events(events, cfg)
    p = _check_period(period if period is not None else cfg.heatmap.period)
    try:
        target = date.fromisoformat(day)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid day: {day!r}") from exc

    grid = build_calendar(evts, p, datetime.now())
    cell = grid.cell_for(target)
    if cell is None:
        raise typer.BadParameter(
            f"{target} is outside the window {grid.window.start} .. {grid.window.end}"
        )
    typer.echo(tooltip_text(cell))


@app.command()
def demo(
    seed: int = typer.Option(7, help="Random seed for synthetic data"),
    period: int = typer.Option(12, help="Trailing months: 1 | 3 | 6 | 12"),
    width: float = typer.Option(1000.0, min=0, help="Container width in px"),
    out: str = typer.Option("demo_activity.svg", help="Where to write the SVG"),
    events_out: Optional[str] = typer.Option(None, help="Also save the generated events JSON"),
) -> None:
    """Render a heatmap from synthetic registry activity."""
    configure_logging(logging.INFO)
    p = _check_period(period)
    w = _check_width(width)

    evts = generate_synthetic_events(SyntheticConfig(seed=seed))
    typer.echo(f"Generated {len(evts)} events")
    if events_out:
        dump_events(evts, Path(events_out).expanduser())

    out_path = Path(out).expanduser()
    grid = _render_to(evts, EventFilters(), p, w, out_path)
    typer.echo(f"Wrote {out_path} ({grid.window.start} .. {grid.window.end})")


@app.command()
def init_config(
    path: str = typer.Argument(
        "change_tracker.toml",
        help="Where to write the configuration TOML",
    ),
) -> None:
    """Write an example change_tracker.toml."""
    out = Path(path).expanduser()
    if out.exists():
        raise typer.BadParameter(f"Refusing to overwrite existing file: {out}")

    out.write_text(EXAMPLE_CONFIG)
    typer.echo(f"Wrote {out} (edit it, then run: change-tracker render --config {out})")


if __name__ == "__main__":
    app()
