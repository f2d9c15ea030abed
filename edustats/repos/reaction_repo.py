from __future__ import annotations

from typing import Protocol
from uuid import UUID

from edustats.models.reaction import Reaction, ReactionTarget

_Key = tuple[UUID, ReactionTarget, str]


class ReactionRepo(Protocol):
    async def get(
        self, user_id: UUID, target: ReactionTarget, key: str
    ) -> Reaction | None: ...
    async def save(self, reaction: Reaction) -> None: ...
    async def list_by_user(self, user_id: UUID) -> list[Reaction]: ...
    async def delete(self, user_id: UUID, target: ReactionTarget, key: str) -> bool: ...


class InMemoryReactionRepo:
    def __init__(self) -> None:
        self._by_key: dict[_Key, Reaction] = {}

    async def get(
        self, user_id: UUID, target: ReactionTarget, key: str
    ) -> Reaction | None:
        return self._by_key.get((user_id, target, key))

    async def save(self, reaction: Reaction) -> None:
        """Insert, or replace the user's reaction on the same target."""
        key = (reaction.user_id, reaction.target, reaction.target_key)
        self._by_key[key] = reaction

    async def list_by_user(self, user_id: UUID) -> list[Reaction]:
        found = [r for r in self._by_key.values() if r.user_id == user_id]
        return sorted(found, key=lambda r: r.updated_at, reverse=True)

    async def delete(self, user_id: UUID, target: ReactionTarget, key: str) -> bool:
        return self._by_key.pop((user_id, target, key), None) is not None
