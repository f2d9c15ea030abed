"""Read models for the statistics reports.

EventGrouping and TouchedKeys are what the event store hands the
aggregation engine; Summary and Progress are what the engine returns.
None of these are persisted.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

from edustats.models.event import (
    Event,
    EventType,
    MaterialPayload,
    PracticeAttemptPayload,
    PracticeCompletedPayload,
)


@dataclass(frozen=True, slots=True)
class PracticeTally:
    attempted: int = 0
    completed: int = 0


@dataclass(frozen=True, slots=True)
class EventGrouping:
    """One user's events grouped by type.

    materials: material id -> number of ``material`` events
    practices: code -> attempts and completions recorded for that code
    """

    visits: int = 0
    materials: dict[UUID, int] = field(default_factory=dict)
    practices: dict[str, PracticeTally] = field(default_factory=dict)

    @property
    def material_events(self) -> int:
        return sum(self.materials.values())

    @property
    def practice_attempts(self) -> int:
        return sum(t.attempted for t in self.practices.values())

    @property
    def practice_completions(self) -> int:
        return sum(t.completed for t in self.practices.values())


@dataclass(frozen=True, slots=True)
class TouchedKeys:
    """Distinct keys one user has touched, per event type."""

    materials: frozenset[UUID] = frozenset()
    completed_codes: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Summary:
    total_visits: int
    total_materials_available: int
    total_materials_accessed: int
    material_access_count: dict[str, int]
    total_practices_available: int
    total_practice_attempts: int
    total_practices_completed: int
    practice_count: dict[str, PracticeTally]
    accessed_materials_count: int
    completed_practices_count: int
    completion_rate_materials: float
    completion_rate_practices: float


@dataclass(frozen=True, slots=True)
class Progress:
    total_materials_available: int
    accessed_materials_count: int
    total_practices_available: int
    completed_practices_count: int
    completion_rate_materials: float
    completion_rate_practices: float


def group_events(events: Iterable[Event]) -> EventGrouping:
    """Fold events into per-type counts.

    Attempts and completions for the same code land in one tally.
    """
    visits = 0
    materials: Counter[UUID] = Counter()
    attempted: Counter[str] = Counter()
    completed: Counter[str] = Counter()

    for event in events:
        payload = event.payload
        if event.event_type is EventType.VISIT:
            visits += 1
        elif isinstance(payload, MaterialPayload):
            materials[payload.material_ref] += 1
        elif isinstance(payload, PracticeAttemptPayload):
            attempted[payload.code] += 1
        elif isinstance(payload, PracticeCompletedPayload):
            completed[payload.code] += 1

    practices = {
        code: PracticeTally(attempted=attempted[code], completed=completed[code])
        for code in attempted.keys() | completed.keys()
    }
    return EventGrouping(visits=visits, materials=dict(materials), practices=practices)


def touched_keys(events: Iterable[Event]) -> TouchedKeys:
    materials: set[UUID] = set()
    codes: set[str] = set()
    for event in events:
        payload = event.payload
        if isinstance(payload, MaterialPayload):
            materials.add(payload.material_ref)
        elif isinstance(payload, PracticeCompletedPayload):
            codes.add(payload.code)
    return TouchedKeys(materials=frozenset(materials), completed_codes=frozenset(codes))
