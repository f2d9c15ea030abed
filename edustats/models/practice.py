from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Score:
    correct: int
    total: int


@dataclass(frozen=True, slots=True)
class Practice:
    """One submitted practice result.

    The distinct ``code`` values across all practices form the
    practice-code universe the statistics reports are keyed by.
    """

    id: UUID
    code: str
    score: Score
    user_id: UUID
    created_at: datetime.datetime
    content: dict[str, Any] | None = field(default=None, compare=False)

    @staticmethod
    def new(
        *,
        code: str,
        score: Score,
        user_id: UUID,
        content: dict[str, Any] | None = None,
    ) -> Practice:
        return Practice(
            id=uuid4(),
            code=code,
            score=score,
            user_id=user_id,
            created_at=datetime.datetime.now(datetime.UTC),
            content=content,
        )
