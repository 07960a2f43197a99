from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class DomainEvent:
    """Base type for all domain events."""

    occurred_at: datetime


# --- Layout / resize notifications ------------------------------------------


@dataclass(frozen=True)
class ContainerResized(DomainEvent):
    container_id: str
    width_px: float


@dataclass(frozen=True)
class WindowResized(DomainEvent):
    width_px: float


# --- Heatmap domain events ---------------------------------------------------


@dataclass(frozen=True)
class ActivityWindowComputed(DomainEvent):
    start: date
    end: date
    period: int
    event_count: int
    dropped_count: int = 0
