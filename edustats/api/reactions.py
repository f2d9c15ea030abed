"""Reaction endpoints.

Students react to a material or a practice with one of four moods.
Reacting again to the same target replaces the earlier mood.  Staff may
list anyone's reactions; students see only their own.
"""

from __future__ import annotations

import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status

from edustats.api.dependencies import (
    MaterialStore,
    ReactionStore,
    ensure_can_read_user,
    require_any_role,
)
from edustats.api.ratelimit import require_rate_limit
from edustats.api.schemas import CamelModel, MessageOut
from edustats.models.ids import parse_id
from edustats.models.principal import Principal
from edustats.models.reaction import Reaction, ReactionKind, ReactionTarget
from edustats.services import reaction_service
from edustats.services.rate_limiter import RateLimitConfig

router = APIRouter(prefix="/reactions", tags=["reactions"])

_require_student = require_any_role({"student"})
_require_any = require_any_role({"admin", "teacher", "student"})

_react_limit = require_rate_limit(RateLimitConfig(capacity=30, refill_rate=0.5))


class ReactionIn(CamelModel):
    reaction: ReactionKind
    type: ReactionTarget
    material_id: str | None = None
    practice_code: str | None = None


class ReactionOut(CamelModel):
    id: str
    reaction: ReactionKind
    type: ReactionTarget
    material_id: str | None
    practice_code: str | None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @classmethod
    def from_reaction(cls, r: Reaction) -> ReactionOut:
        return cls(
            id=str(r.id),
            reaction=r.reaction,
            type=r.target,
            material_id=str(r.material_id) if r.material_id is not None else None,
            practice_code=r.practice_code,
            created_at=r.created_at,
            updated_at=r.updated_at,
        )


class ReactionResponse(CamelModel):
    message: str
    reaction: ReactionOut


class ReactionListResponse(CamelModel):
    message: str
    reactions: list[ReactionOut]


@router.post(
    "",
    response_model=ReactionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(_react_limit)],
)
async def save_reaction(
    body: ReactionIn,
    principal: Annotated[Principal, Depends(_require_student)],
    reactions: ReactionStore,
    materials: MaterialStore,
) -> ReactionResponse:
    reaction = await reaction_service.save_reaction(
        principal.user_id,
        body.reaction,
        body.type,
        body.material_id,
        body.practice_code,
        reactions=reactions,
        materials=materials,
    )
    return ReactionResponse(
        message="Reaction saved", reaction=ReactionOut.from_reaction(reaction)
    )


@router.get("/user/{id}", response_model=ReactionListResponse)
async def list_user_reactions(
    id: str,
    principal: Annotated[Principal, Depends(_require_any)],
    reactions: ReactionStore,
) -> ReactionListResponse:
    user_id = parse_id(id, what="User")
    ensure_can_read_user(principal, user_id)

    found = await reaction_service.list_reactions(user_id, reactions=reactions)
    return ReactionListResponse(
        message="Reactions retrieved",
        reactions=[ReactionOut.from_reaction(r) for r in found],
    )


@router.get("/material/{material_id}", response_model=ReactionResponse)
async def get_material_reaction(
    material_id: str,
    principal: Annotated[Principal, Depends(_require_student)],
    reactions: ReactionStore,
) -> ReactionResponse:
    reaction = await reaction_service.get_reaction(
        principal.user_id, ReactionTarget.MATERIAL, material_id, reactions=reactions
    )
    return ReactionResponse(
        message="Reaction retrieved", reaction=ReactionOut.from_reaction(reaction)
    )


@router.get("/practice/{code}", response_model=ReactionResponse)
async def get_practice_reaction(
    code: str,
    principal: Annotated[Principal, Depends(_require_student)],
    reactions: ReactionStore,
) -> ReactionResponse:
    reaction = await reaction_service.get_reaction(
        principal.user_id, ReactionTarget.PRACTICE, code, reactions=reactions
    )
    return ReactionResponse(
        message="Reaction retrieved", reaction=ReactionOut.from_reaction(reaction)
    )


@router.delete("/material/{material_id}", response_model=MessageOut)
async def delete_material_reaction(
    material_id: str,
    principal: Annotated[Principal, Depends(_require_student)],
    reactions: ReactionStore,
) -> MessageOut:
    await reaction_service.remove_reaction(
        principal.user_id, ReactionTarget.MATERIAL, material_id, reactions=reactions
    )
    return MessageOut(message="Reaction deleted successfully")


@router.delete("/practice/{code}", response_model=MessageOut)
async def delete_practice_reaction(
    code: str,
    principal: Annotated[Principal, Depends(_require_student)],
    reactions: ReactionStore,
) -> MessageOut:
    await reaction_service.remove_reaction(
        principal.user_id, ReactionTarget.PRACTICE, code, reactions=reactions
    )
    return MessageOut(message="Reaction deleted successfully")
