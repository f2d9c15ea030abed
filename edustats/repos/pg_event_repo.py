"""PostgreSQL implementation of EventRepo.

Grouping runs server-side: one GROUP BY over (event_type, materialRef,
code) returns at most one row per distinct key, so the report cost does
not grow with the number of raw events shipped to the app.
"""

from __future__ import annotations

from collections import defaultdict
from uuid import UUID

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from edustats.db.tables import StatisticEventRow
from edustats.models.event import Event, EventType, parse_payload, payload_to_dict
from edustats.models.report import EventGrouping, PracticeTally, TouchedKeys

_material_ref = StatisticEventRow.payload["materialRef"].astext
_code = StatisticEventRow.payload["code"].astext


class PgEventRepo:
    """Satisfies the EventRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert(self, event: Event) -> None:
        row = StatisticEventRow(
            id=event.id,
            event_type=event.event_type.value,
            payload=payload_to_dict(event.payload),
            user_id=event.user_id,
            created_at=event.created_at,
        )
        self._session.add(row)
        await self._session.flush()

    async def find_by_user(self, user_id: UUID) -> list[Event]:
        stmt = select(StatisticEventRow).where(StatisticEventRow.user_id == user_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_event(row) for row in rows]

    async def group_by_type_for_user(self, user_id: UUID) -> EventGrouping:
        stmt = (
            select(
                StatisticEventRow.event_type,
                _material_ref.label("material_ref"),
                _code.label("code"),
                func.count().label("n"),
            )
            .where(StatisticEventRow.user_id == user_id)
            .group_by(StatisticEventRow.event_type, _material_ref, _code)
        )
        result = await self._session.execute(stmt)

        visits = 0
        materials: dict[UUID, int] = defaultdict(int)
        attempted: dict[str, int] = defaultdict(int)
        completed: dict[str, int] = defaultdict(int)
        for event_type, material_ref, code, n in result.all():
            if event_type == EventType.VISIT.value:
                visits += n
            elif event_type == EventType.MATERIAL.value and material_ref:
                materials[UUID(material_ref)] += n
            elif event_type == EventType.PRACTICE_ATTEMPT.value and code:
                attempted[code] += n
            elif event_type == EventType.PRACTICE_COMPLETED.value and code:
                completed[code] += n

        practices = {
            code: PracticeTally(attempted=attempted[code], completed=completed[code])
            for code in attempted.keys() | completed.keys()
        }
        return EventGrouping(
            visits=visits, materials=dict(materials), practices=practices
        )

    async def touched_keys_for_user(self, user_id: UUID) -> TouchedKeys:
        material_stmt = select(distinct(_material_ref)).where(
            StatisticEventRow.user_id == user_id,
            StatisticEventRow.event_type == EventType.MATERIAL.value,
        )
        code_stmt = select(distinct(_code)).where(
            StatisticEventRow.user_id == user_id,
            StatisticEventRow.event_type == EventType.PRACTICE_COMPLETED.value,
        )
        material_refs = (await self._session.execute(material_stmt)).scalars().all()
        codes = (await self._session.execute(code_stmt)).scalars().all()
        return TouchedKeys(
            materials=frozenset(UUID(ref) for ref in material_refs if ref),
            completed_codes=frozenset(code for code in codes if code),
        )


def _row_to_event(row: StatisticEventRow) -> Event:
    # Rows were validated on insert; parse_payload only restores the types.
    event_type = EventType(row.event_type)
    return Event(
        id=row.id,
        event_type=event_type,
        payload=parse_payload(event_type, row.payload or {}),
        user_id=row.user_id,
        created_at=row.created_at,
    )
