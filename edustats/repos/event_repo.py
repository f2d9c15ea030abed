from __future__ import annotations

from typing import Protocol
from uuid import UUID

from edustats.models.event import Event
from edustats.models.report import (
    EventGrouping,
    TouchedKeys,
    group_events,
    touched_keys,
)


class EventRepo(Protocol):
    async def insert(self, event: Event) -> None: ...
    async def find_by_user(self, user_id: UUID) -> list[Event]: ...
    async def group_by_type_for_user(self, user_id: UUID) -> EventGrouping: ...
    async def touched_keys_for_user(self, user_id: UUID) -> TouchedKeys: ...


class InMemoryEventRepo:
    """Append-only list of events; grouping is done in Python."""

    def __init__(self) -> None:
        self._events: list[Event] = []

    async def insert(self, event: Event) -> None:
        self._events.append(event)

    async def find_by_user(self, user_id: UUID) -> list[Event]:
        return [e for e in self._events if e.user_id == user_id]

    async def group_by_type_for_user(self, user_id: UUID) -> EventGrouping:
        return group_events(e for e in self._events if e.user_id == user_id)

    async def touched_keys_for_user(self, user_id: UUID) -> TouchedKeys:
        return touched_keys(e for e in self._events if e.user_id == user_id)
