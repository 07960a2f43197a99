from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from change_tracker.heatmap.domain.models import ChangeEvent, EventType


@dataclass(frozen=True)
class SyntheticConfig:
    n_namespaces: int = 4
    days: int = 365
    activity_prob_per_day: float = 0.35
    max_events_per_day: int = 4
    seed: int = 7


_ADD_TEMPLATES = (
    "Namespace '{ns}' created",
    "Repository '{ns}/{repo}' created",
    "Developer added to namespace '{ns}'",
    "Upstream registry attached to '{ns}'",
)
_CHANGE_TEMPLATES = (
    "Namespace '{ns}' visibility changed from public to private",
    "Repository '{ns}/{repo}' marked as deprecated",
    "Maintainer role granted on '{ns}'",
    "Description of '{ns}/{repo}' updated",
)
_DELETE_TEMPLATES = (
    "Repository '{ns}/{repo}' deleted",
    "Guest removed from namespace '{ns}'",
    "Tag pruned from '{ns}/{repo}'",
    "",
)
_TEMPLATES = {
    EventType.ADD: _ADD_TEMPLATES,
    EventType.CHANGE: _CHANGE_TEMPLATES,
    EventType.DELETE: _DELETE_TEMPLATES,
}
_REPOS = ("core", "api", "web", "worker", "tools")


def generate_synthetic_events(
    cfg: SyntheticConfig,
    now: datetime | None = None,
) -> list[ChangeEvent]:
    """Reproducible activity feed resembling a registry console's history."""
    rng = random.Random(cfg.seed)
    now = now or datetime.now(tz=timezone.utc)
    start = now - timedelta(days=cfg.days)
    namespaces = [f"ns-{chr(ord('a') + i)}" for i in range(cfg.n_namespaces)]

    events: list[ChangeEvent] = []
    for d in range(cfg.days + 1):
        day = start + timedelta(days=d)
        # Weekends are mostly quiet.
        prob = cfg.activity_prob_per_day if day.weekday() < 5 else cfg.activity_prob_per_day / 5
        if rng.random() >= prob:
            continue
        for _ in range(rng.randint(1, cfg.max_events_per_day)):
            event_type = rng.choices(
                (EventType.ADD, EventType.CHANGE, EventType.DELETE),
                weights=(0.45, 0.35, 0.20),
            )[0]
            template = rng.choice(_TEMPLATES[event_type])
            ts = day.replace(hour=rng.randint(8, 18), minute=rng.randint(0, 59), second=0, microsecond=0)
            if ts > now:
                ts = now
            events.append(
                ChangeEvent(
                    id=str(len(events) + 1),
                    timestamp=ts,
                    type=event_type,
                    message=template.format(ns=rng.choice(namespaces), repo=rng.choice(_REPOS)),
                )
            )

    # Sort for reproducibility
    events.sort(key=lambda e: e.timestamp)
    return events
