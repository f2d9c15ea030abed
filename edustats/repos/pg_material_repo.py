"""PostgreSQL implementation of MaterialRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from edustats.core.errors import Conflict
from edustats.db.tables import MaterialRow
from edustats.models.material import Material


class PgMaterialRepo:
    """Satisfies the MaterialRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[Material]:
        stmt = select(MaterialRow).order_by(MaterialRow.created_at.desc())
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_material(row) for row in rows]

    async def get(self, material_id: UUID) -> Material | None:
        row = await self._session.get(MaterialRow, material_id)
        if row is None:
            return None
        return _row_to_material(row)

    async def get_by_title(self, title: str) -> Material | None:
        stmt = select(MaterialRow).where(MaterialRow.title == title)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_material(row)

    async def add(self, material: Material) -> None:
        self._session.add(
            MaterialRow(
                id=material.id,
                title=material.title,
                description=material.description,
                formula=material.formula,
                example=material.example,
                created_at=material.created_at,
                updated_at=material.updated_at,
            )
        )
        await self._flush_unique()

    async def update(self, material: Material) -> None:
        stmt = (
            update(MaterialRow)
            .where(MaterialRow.id == material.id)
            .values(
                title=material.title,
                description=material.description,
                formula=material.formula,
                example=material.example,
                updated_at=material.updated_at,
            )
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError:
            raise Conflict("Material with this title already exists") from None
        if result.rowcount == 0:
            raise KeyError("material not found")

    async def delete(self, material_id: UUID) -> bool:
        stmt = delete(MaterialRow).where(MaterialRow.id == material_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def _flush_unique(self) -> None:
        # The unique index on title is the final arbiter under concurrent writes
        try:
            await self._session.flush()
        except IntegrityError:
            raise Conflict("Material with this title already exists") from None


def _row_to_material(row: MaterialRow) -> Material:
    return Material(
        id=row.id,
        title=row.title,
        description=row.description,
        formula=row.formula,
        example=row.example,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
