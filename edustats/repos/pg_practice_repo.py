"""PostgreSQL implementation of PracticeRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import distinct, select
from sqlalchemy.ext.asyncio import AsyncSession

from edustats.db.tables import PracticeRow
from edustats.models.practice import Practice, Score


class PgPracticeRepo:
    """Satisfies the PracticeRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, practice: Practice) -> None:
        self._session.add(
            PracticeRow(
                id=practice.id,
                code=practice.code,
                score_correct=practice.score.correct,
                score_total=practice.score.total,
                content=practice.content,
                user_id=practice.user_id,
                created_at=practice.created_at,
            )
        )
        await self._session.flush()

    async def list_by_user(self, user_id: UUID) -> list[Practice]:
        stmt = select(PracticeRow).where(PracticeRow.user_id == user_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_practice(row) for row in rows]

    async def list_distinct_codes(self) -> list[str]:
        stmt = select(distinct(PracticeRow.code)).order_by(PracticeRow.code)
        return list((await self._session.execute(stmt)).scalars().all())


def _row_to_practice(row: PracticeRow) -> Practice:
    return Practice(
        id=row.id,
        code=row.code,
        score=Score(correct=row.score_correct, total=row.score_total),
        user_id=row.user_id,
        created_at=row.created_at,
        content=row.content,
    )
