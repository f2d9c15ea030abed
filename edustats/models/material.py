from __future__ import annotations

import datetime
from dataclasses import dataclass, replace
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Material:
    """A learning unit in the catalog. Titles are unique."""

    id: UUID
    title: str
    description: str
    formula: str
    example: str
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @staticmethod
    def new(*, title: str, description: str, formula: str, example: str) -> Material:
        now = datetime.datetime.now(datetime.UTC)
        return Material(
            id=uuid4(),
            title=title,
            description=description,
            formula=formula,
            example=example,
            created_at=now,
            updated_at=now,
        )

    def with_changes(self, **changes: str) -> Material:
        return replace(
            self, **changes, updated_at=datetime.datetime.now(datetime.UTC)
        )
