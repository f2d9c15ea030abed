"""Event tracking and statistics report endpoints.

  POST /statistics                       student        append one event
  GET  /statistics/user/{id}             admin, teacher raw events, newest first
  GET  /statistics/summary/user/{id}     any role*      per-item Summary
  GET  /statistics/progress/user/{id}    any role*      scalar Progress

  * students only for their own id
"""

from __future__ import annotations

import datetime
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from pydantic import Field

from edustats.api.dependencies import (
    EventStore,
    MaterialStore,
    PracticeStore,
    ensure_can_read_user,
    require_any_role,
)
from edustats.api.ratelimit import require_rate_limit
from edustats.api.schemas import CamelModel
from edustats.models.event import Event, payload_to_dict
from edustats.models.ids import parse_id
from edustats.models.principal import Principal
from edustats.models.report import Progress, Summary
from edustats.services import statistics_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/statistics", tags=["statistics"])

_require_student = require_any_role({"student"})
_require_staff = require_any_role({"admin", "teacher"})
_require_any = require_any_role({"admin", "teacher", "student"})


# --- Pydantic schemas ---


class StatisticIn(CamelModel):
    event_type: str
    payload: dict[str, Any] = Field(default_factory=dict)


class StatisticOut(CamelModel):
    id: str
    event_type: str
    payload: dict[str, Any]
    user_id: str
    created_at: datetime.datetime

    @classmethod
    def from_event(cls, event: Event) -> StatisticOut:
        return cls(
            id=str(event.id),
            event_type=event.event_type.value,
            payload=payload_to_dict(event.payload),
            user_id=str(event.user_id),
            created_at=event.created_at,
        )


class StatisticCreatedOut(CamelModel):
    message: str
    statistic: StatisticOut


class StatisticListOut(CamelModel):
    message: str
    statistics: list[StatisticOut]


class PracticeCountOut(CamelModel):
    attempted: int
    completed: int


class SummaryOut(CamelModel):
    total_visits: int
    total_materials_available: int
    total_materials_accessed: int
    material_access_count: dict[str, int]
    total_practices_available: int
    total_practice_attempts: int
    total_practices_completed: int
    practice_count: dict[str, PracticeCountOut]
    accessed_materials_count: int
    completed_practices_count: int
    completion_rate_materials: float
    completion_rate_practices: float

    @classmethod
    def from_summary(cls, summary: Summary) -> SummaryOut:
        return cls(
            total_visits=summary.total_visits,
            total_materials_available=summary.total_materials_available,
            total_materials_accessed=summary.total_materials_accessed,
            material_access_count=summary.material_access_count,
            total_practices_available=summary.total_practices_available,
            total_practice_attempts=summary.total_practice_attempts,
            total_practices_completed=summary.total_practices_completed,
            practice_count={
                code: PracticeCountOut(attempted=t.attempted, completed=t.completed)
                for code, t in summary.practice_count.items()
            },
            accessed_materials_count=summary.accessed_materials_count,
            completed_practices_count=summary.completed_practices_count,
            completion_rate_materials=summary.completion_rate_materials,
            completion_rate_practices=summary.completion_rate_practices,
        )


class ProgressOut(CamelModel):
    total_materials_available: int
    accessed_materials_count: int
    total_practices_available: int
    completed_practices_count: int
    completion_rate_materials: float
    completion_rate_practices: float

    @classmethod
    def from_progress(cls, progress: Progress) -> ProgressOut:
        return cls(
            total_materials_available=progress.total_materials_available,
            accessed_materials_count=progress.accessed_materials_count,
            total_practices_available=progress.total_practices_available,
            completed_practices_count=progress.completed_practices_count,
            completion_rate_materials=progress.completion_rate_materials,
            completion_rate_practices=progress.completion_rate_practices,
        )


class SummaryResponse(CamelModel):
    message: str
    summary: SummaryOut


class ProgressResponse(CamelModel):
    message: str
    progress: ProgressOut


# --- Endpoints ---


@router.post(
    "",
    response_model=StatisticCreatedOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_rate_limit())],
)
async def track_statistic(
    body: StatisticIn,
    principal: Annotated[Principal, Depends(_require_student)],
    events: EventStore,
) -> StatisticCreatedOut:
    event = await statistics_service.record_event(
        principal.user_id, body.event_type, body.payload, events=events
    )
    return StatisticCreatedOut(
        message="Statistic recorded", statistic=StatisticOut.from_event(event)
    )


@router.get("/user/{id}", response_model=StatisticListOut)
async def list_user_statistics(
    id: str,
    principal: Annotated[Principal, Depends(_require_staff)],
    events: EventStore,
) -> StatisticListOut:
    user_id = parse_id(id, what="User")
    found = await statistics_service.list_events(user_id, events=events)
    logger.info(
        "Statistics listed for user=%s by user=%s count=%d",
        user_id,
        principal.user_id,
        len(found),
    )
    return StatisticListOut(
        message="Statistics retrieved",
        statistics=[StatisticOut.from_event(e) for e in found],
    )


@router.get("/summary/user/{id}", response_model=SummaryResponse)
async def get_user_summary(
    id: str,
    principal: Annotated[Principal, Depends(_require_any)],
    events: EventStore,
    materials: MaterialStore,
    practices: PracticeStore,
) -> SummaryResponse:
    user_id = parse_id(id, what="User")
    ensure_can_read_user(principal, user_id)

    summary = await statistics_service.compute_summary(
        user_id, events=events, materials=materials, practices=practices
    )
    return SummaryResponse(
        message="Statistics summary retrieved",
        summary=SummaryOut.from_summary(summary),
    )


@router.get("/progress/user/{id}", response_model=ProgressResponse)
async def get_user_progress(
    id: str,
    principal: Annotated[Principal, Depends(_require_any)],
    events: EventStore,
    materials: MaterialStore,
    practices: PracticeStore,
) -> ProgressResponse:
    user_id = parse_id(id, what="User")
    ensure_can_read_user(principal, user_id)

    progress = await statistics_service.compute_progress(
        user_id, events=events, materials=materials, practices=practices
    )
    return ProgressResponse(
        message="Learning progress retrieved",
        progress=ProgressOut.from_progress(progress),
    )
