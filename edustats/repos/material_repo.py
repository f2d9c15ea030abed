from __future__ import annotations

from typing import Protocol
from uuid import UUID

from edustats.core.errors import Conflict
from edustats.models.material import Material


class MaterialRepo(Protocol):
    async def list_all(self) -> list[Material]: ...
    async def get(self, material_id: UUID) -> Material | None: ...
    async def get_by_title(self, title: str) -> Material | None: ...
    async def add(self, material: Material) -> None: ...
    async def update(self, material: Material) -> None: ...
    async def delete(self, material_id: UUID) -> bool: ...


class InMemoryMaterialRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Material] = {}

    async def list_all(self) -> list[Material]:
        # Reversed first so same-timestamp inserts still come out newest first
        return sorted(
            reversed(list(self._by_id.values())),
            key=lambda m: m.created_at,
            reverse=True,
        )

    async def get(self, material_id: UUID) -> Material | None:
        return self._by_id.get(material_id)

    async def get_by_title(self, title: str) -> Material | None:
        return next((m for m in self._by_id.values() if m.title == title), None)

    async def add(self, material: Material) -> None:
        if await self.get_by_title(material.title) is not None:
            raise Conflict("Material with this title already exists")
        self._by_id[material.id] = material

    async def update(self, material: Material) -> None:
        existing = await self.get_by_title(material.title)
        if existing is not None and existing.id != material.id:
            raise Conflict("Material with this title already exists")
        if material.id not in self._by_id:
            raise KeyError("material not found")
        self._by_id[material.id] = material

    async def delete(self, material_id: UUID) -> bool:
        return self._by_id.pop(material_id, None) is not None
