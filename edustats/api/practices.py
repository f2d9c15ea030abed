"""Practice submission endpoints.

A submission stores the scored result and appends a practice_completed
event for the submitting student.  Submitted codes make up the
practice-code universe the statistics reports are keyed by.
"""

from __future__ import annotations

import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from pydantic import Field

from edustats.api.dependencies import (
    EventStore,
    PracticeStore,
    ensure_can_read_user,
    require_any_role,
)
from edustats.api.ratelimit import require_rate_limit
from edustats.api.schemas import CamelModel
from edustats.models.ids import parse_id
from edustats.models.practice import Practice
from edustats.models.principal import Principal
from edustats.services import practice_service
from edustats.services.rate_limiter import RateLimitConfig

router = APIRouter(prefix="/practices", tags=["practices"])

_require_student = require_any_role({"student"})
_require_any = require_any_role({"admin", "teacher", "student"})

# A practice round takes minutes; 20 burst then one every 10s is plenty.
_submit_limit = require_rate_limit(RateLimitConfig(capacity=20, refill_rate=0.1))


class ScoreIn(CamelModel):
    correct: int
    total: int


class PracticeIn(CamelModel):
    code: str = Field(min_length=1, max_length=128)
    score: ScoreIn
    content: dict[str, Any] | None = None


class ScoreOut(CamelModel):
    correct: int
    total: int


class PracticeOut(CamelModel):
    id: str
    code: str
    score: ScoreOut
    content: dict[str, Any] | None
    user_id: str
    created_at: datetime.datetime

    @classmethod
    def from_practice(cls, p: Practice) -> PracticeOut:
        return cls(
            id=str(p.id),
            code=p.code,
            score=ScoreOut(correct=p.score.correct, total=p.score.total),
            content=p.content,
            user_id=str(p.user_id),
            created_at=p.created_at,
        )


class PracticeResponse(CamelModel):
    message: str
    practice: PracticeOut


class PracticeListResponse(CamelModel):
    message: str
    practices: list[PracticeOut]


@router.post(
    "",
    response_model=PracticeResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(_submit_limit)],
)
async def submit_practice(
    body: PracticeIn,
    principal: Annotated[Principal, Depends(_require_student)],
    practices: PracticeStore,
    events: EventStore,
) -> PracticeResponse:
    practice = await practice_service.submit_practice(
        principal.user_id,
        body.code,
        body.score.correct,
        body.score.total,
        body.content,
        practices=practices,
        events=events,
    )
    return PracticeResponse(
        message="Practice submitted", practice=PracticeOut.from_practice(practice)
    )


@router.get("/user/{id}", response_model=PracticeListResponse)
async def list_user_practices(
    id: str,
    principal: Annotated[Principal, Depends(_require_any)],
    practices: PracticeStore,
) -> PracticeListResponse:
    user_id = parse_id(id, what="User")
    ensure_can_read_user(principal, user_id)

    found = await practice_service.list_practices(user_id, practices=practices)
    return PracticeListResponse(
        message="Practices retrieved",
        practices=[PracticeOut.from_practice(p) for p in found],
    )
