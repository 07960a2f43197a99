from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from change_tracker.common.time_utils import parse_iso8601
from change_tracker.heatmap.domain.models import ChangeEvent, EventType


logger = logging.getLogger(__name__)


class EventsFileError(ValueError):
    pass


def parse_event(obj: dict[str, Any], index: int = 0) -> ChangeEvent:
    for key in ("id", "timestamp", "type"):
        if obj.get(key) in (None, ""):
            raise EventsFileError(f"Event #{index}: missing '{key}'")
    try:
        ts = parse_iso8601(str(obj["timestamp"]))
    except ValueError as exc:
        raise EventsFileError(f"Event #{index}: bad timestamp {obj['timestamp']!r}") from exc
    try:
        event_type = EventType(str(obj["type"]).lower())
    except ValueError as exc:
        raise EventsFileError(f"Event #{index}: unknown type {obj['type']!r}") from exc
    return ChangeEvent(
        id=str(obj["id"]),
        timestamp=ts,
        type=event_type,
        message=str(obj.get("message") or ""),
    )


def load_events(path: Path) -> list[ChangeEvent]:
    """Load registry change events from a JSON file.

    Expected format: a JSON array of objects, e.g.

    [
      {
        "id": "1",
        "timestamp": "2025-01-02T09:12:00Z",
        "type": "add",
        "message": "Namespace 'ns-alpha' created"
      }
    ]
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise EventsFileError(f"{path}: not valid UTF-8 ({exc})") from exc
    except json.JSONDecodeError as exc:
        raise EventsFileError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(raw, list):
        raise EventsFileError("Events file must be a JSON list")

    events: list[ChangeEvent] = []
    skipped = 0
    for i, obj in enumerate(raw):
        if not isinstance(obj, dict):
            skipped += 1
            continue
        events.append(parse_event(obj, i))

    if skipped:
        logger.warning("Skipped %d non-object row(s) in %s", skipped, path)
    logger.info("Loaded %d event(s) from %s", len(events), path)
    return events


def dump_events(events: list[ChangeEvent], path: Path) -> None:
    payload = [
        {
            "id": e.id,
            "timestamp": e.timestamp.isoformat(),
            "type": e.type.value,
            "message": e.message,
        }
        for e in events
    ]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
