from __future__ import annotations

from typing import Protocol
from uuid import UUID

from edustats.models.practice import Practice


class PracticeRepo(Protocol):
    async def add(self, practice: Practice) -> None: ...
    async def list_by_user(self, user_id: UUID) -> list[Practice]: ...
    async def list_distinct_codes(self) -> list[str]: ...


class InMemoryPracticeRepo:
    def __init__(self) -> None:
        self._practices: list[Practice] = []

    async def add(self, practice: Practice) -> None:
        self._practices.append(practice)

    async def list_by_user(self, user_id: UUID) -> list[Practice]:
        return [p for p in self._practices if p.user_id == user_id]

    async def list_distinct_codes(self) -> list[str]:
        # dict.fromkeys keeps first-seen order, which makes reports stable
        return list(dict.fromkeys(p.code for p in self._practices))
