"""PostgreSQL implementation of ReactionRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from edustats.db.tables import ReactionRow
from edustats.models.reaction import Reaction, ReactionKind, ReactionTarget


class PgReactionRepo:
    """Satisfies the ReactionRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(
        self, user_id: UUID, target: ReactionTarget, key: str
    ) -> Reaction | None:
        stmt = select(ReactionRow).where(
            ReactionRow.user_id == user_id,
            ReactionRow.target == target.value,
            ReactionRow.target_key == key,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_reaction(row)

    async def save(self, reaction: Reaction) -> None:
        # The unique constraint makes concurrent first reactions collapse into one row
        stmt = insert(ReactionRow).values(
            id=reaction.id,
            user_id=reaction.user_id,
            reaction=reaction.reaction.value,
            target=reaction.target.value,
            target_key=reaction.target_key,
            created_at=reaction.created_at,
            updated_at=reaction.updated_at,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_reactions_user_target",
            set_={
                "reaction": stmt.excluded.reaction,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self._session.execute(stmt)

    async def list_by_user(self, user_id: UUID) -> list[Reaction]:
        stmt = (
            select(ReactionRow)
            .where(ReactionRow.user_id == user_id)
            .order_by(ReactionRow.updated_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_reaction(row) for row in rows]

    async def delete(self, user_id: UUID, target: ReactionTarget, key: str) -> bool:
        stmt = delete(ReactionRow).where(
            ReactionRow.user_id == user_id,
            ReactionRow.target == target.value,
            ReactionRow.target_key == key,
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0


def _row_to_reaction(row: ReactionRow) -> Reaction:
    target = ReactionTarget(row.target)
    is_material = target is ReactionTarget.MATERIAL
    return Reaction(
        id=row.id,
        user_id=row.user_id,
        reaction=ReactionKind(row.reaction),
        target=target,
        material_id=UUID(row.target_key) if is_material else None,
        practice_code=None if is_material else row.target_key,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
