from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from change_tracker.heatmap.domain.models import EventFilters, validate_period


def _expand(path: str) -> Path:
    return Path(os.path.expanduser(path)).resolve()


def _read_toml(path: Path) -> dict[str, Any]:
    """Read TOML into a dict, supporting Python 3.10+.

    Uses tomllib when available, falls back to tomli.
    """
    data = path.read_bytes()
    try:
        import tomllib  # type: ignore[attr-defined]

        return tomllib.loads(data.decode("utf-8"))
    except ModuleNotFoundError:
        import tomli  # type: ignore[import-not-found]

        return tomli.loads(data.decode("utf-8"))


class HeatmapConfig(BaseModel):
    period: int = Field(default=12, description="Trailing window in months: 1 | 3 | 6 | 12")
    container_width: float = Field(
        default=1000.0,
        ge=0,
        allow_inf_nan=False,
        description="Width in px of the container the grid must fit.",
    )

    @field_validator("period")
    @classmethod
    def _check_period(cls, v: int) -> int:
        return validate_period(v)


class FiltersConfig(BaseModel):
    """Which kinds of activity are eligible to colour a cell."""

    add: bool = Field(default=True)
    change: bool = Field(default=True)
    delete: bool = Field(default=True)

    def to_filters(self) -> EventFilters:
        return EventFilters(add=self.add, change=self.change, delete=self.delete)


class InputConfig(BaseModel):
    events_path: str = Field(
        default="",
        description="JSON array of {id, timestamp, type, message} records.",
    )

    def resolve(self) -> Path | None:
        return _expand(self.events_path) if self.events_path else None


class OutputConfig(BaseModel):
    svg_path: str = Field(default="activity.svg")

    def resolve(self) -> Path:
        return _expand(self.svg_path)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    log_dir: str | None = Field(default=None)


class ChangeTrackerConfig(BaseModel):
    heatmap: HeatmapConfig = Field(default_factory=HeatmapConfig)
    filters: FiltersConfig = Field(default_factory=FiltersConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path) -> "ChangeTrackerConfig":
        raw = _read_toml(path)
        return cls.model_validate(raw)


EXAMPLE_CONFIG = """\
# change-tracker configuration

[heatmap]
# Trailing window in months: 1, 3, 6 or 12
period = 12
# Width in px of the container the grid must fit
container_width = 1000

[filters]
add = true
change = true
delete = true

[input]
# JSON array of {"id", "timestamp", "type", "message"} records
events_path = "events.json"

[output]
svg_path = "activity.svg"

[logging]
level = "INFO"
# log_dir = "logs"
"""
