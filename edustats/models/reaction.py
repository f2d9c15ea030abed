"""Student reactions to a material or a practice.

A student holds at most one reaction per target; reacting again replaces
the previous choice.
"""

from __future__ import annotations

import datetime
import enum
from dataclasses import dataclass, replace
from uuid import UUID, uuid4


class ReactionKind(str, enum.Enum):
    HAPPY = "happy"
    NEUTRAL = "neutral"
    SAD = "sad"
    CONFUSED = "confused"


class ReactionTarget(str, enum.Enum):
    MATERIAL = "material"
    PRACTICE = "practice"


@dataclass(frozen=True, slots=True)
class Reaction:
    id: UUID
    user_id: UUID
    reaction: ReactionKind
    target: ReactionTarget
    material_id: UUID | None
    practice_code: str | None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    def __post_init__(self) -> None:
        if self.target is ReactionTarget.MATERIAL:
            ok = self.material_id is not None and self.practice_code is None
        else:
            ok = self.practice_code is not None and self.material_id is None
        if not ok:
            raise TypeError(f"{self.target.value} reaction has the wrong reference")

    @property
    def target_key(self) -> str:
        """Material id or practice code, whichever the target uses."""
        if self.target is ReactionTarget.MATERIAL:
            return str(self.material_id)
        return self.practice_code or ""

    @staticmethod
    def new(
        *,
        user_id: UUID,
        reaction: ReactionKind,
        material_id: UUID | None = None,
        practice_code: str | None = None,
    ) -> Reaction:
        now = datetime.datetime.now(datetime.UTC)
        if material_id is not None:
            target = ReactionTarget.MATERIAL
        else:
            target = ReactionTarget.PRACTICE
        return Reaction(
            id=uuid4(),
            user_id=user_id,
            reaction=reaction,
            target=target,
            material_id=material_id,
            practice_code=practice_code,
            created_at=now,
            updated_at=now,
        )

    def with_reaction(self, reaction: ReactionKind) -> Reaction:
        return replace(
            self, reaction=reaction, updated_at=datetime.datetime.now(datetime.UTC)
        )
