from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from change_tracker.integration.event_bus import InMemoryEventBus
from change_tracker.integration.events import DomainEvent


@dataclass(frozen=True)
class _Evt(DomainEvent):
    value: int


def test_event_bus_publish_subscribe() -> None:
    bus = InMemoryEventBus()
    seen: list[int] = []

    def handler(e: _Evt) -> None:
        seen.append(e.value)

    bus.subscribe(_Evt, handler)
    bus.publish(_Evt(occurred_at=datetime.now(timezone.utc), value=1))
    bus.publish(_Evt(occurred_at=datetime.now(timezone.utc), value=2))

    assert seen == [1, 2]


def test_unsubscribe_stops_delivery() -> None:
    bus = InMemoryEventBus()
    seen: list[int] = []

    def handler(e: _Evt) -> None:
        seen.append(e.value)

    bus.subscribe(_Evt, handler)
    bus.publish(_Evt(occurred_at=datetime.now(timezone.utc), value=1))
    bus.unsubscribe(_Evt, handler)
    bus.unsubscribe(_Evt, handler)
    bus.publish(_Evt(occurred_at=datetime.now(timezone.utc), value=2))

    assert seen == [1]
    assert bus.handler_count() == 0


def test_failing_handler_does_not_block_others() -> None:
    bus = InMemoryEventBus()
    seen: list[int] = []

    def broken(e: _Evt) -> None:
        raise RuntimeError("boom")

    bus.subscribe(_Evt, broken)
    bus.subscribe(_Evt, lambda e: seen.append(e.value))
    bus.publish(_Evt(occurred_at=datetime.now(timezone.utc), value=3))

    assert seen == [3]
