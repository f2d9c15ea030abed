"""Statistics aggregation: per-user Summary and Progress reports.

Both reports join one user's event log against the full catalog:

  - every catalog material appears in the output keyed by title, and
    every code in the practice-code universe appears keyed by code,
    with zeros for anything the user never touched;
  - completion rates are accessed/available and completed/available,
    as unrounded percentages, 0.0 when nothing is available.

The independent store reads behind one report are awaited together.
Nothing here writes, caches, retries or swallows store errors.
"""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from edustats.core.errors import ValidationError
from edustats.core.metrics import EVENTS_RECORDED, REPORT_DURATION
from edustats.models.event import (
    TRACKABLE_TYPES,
    Event,
    parse_event_type,
    parse_payload,
)
from edustats.models.ids import parse_id
from edustats.models.report import PracticeTally, Progress, Summary
from edustats.repos.event_repo import EventRepo
from edustats.repos.material_repo import MaterialRepo
from edustats.repos.practice_repo import PracticeRepo

logger = logging.getLogger(__name__)


def rate(numerator: int, denominator: int) -> float:
    """Percentage of numerator over denominator; 0.0 for an empty denominator."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100


async def compute_summary(
    user_id: str | UUID,
    *,
    events: EventRepo,
    materials: MaterialRepo,
    practices: PracticeRepo,
) -> Summary:
    """Full per-item report for one user.

    Raises InvalidIdentifier when user_id is malformed.  A well-formed id
    with no events yields a report of zeros over the current catalog.
    """
    uid = parse_id(user_id, what="User")

    with REPORT_DURATION.labels(report="summary").time():
        catalog, codes, grouping = await asyncio.gather(
            materials.list_all(),
            practices.list_distinct_codes(),
            events.group_by_type_for_user(uid),
        )

        material_access_count = {
            m.title: grouping.materials.get(m.id, 0) for m in catalog
        }
        practice_count = {
            code: grouping.practices.get(code, PracticeTally()) for code in codes
        }

        accessed = sum(1 for n in material_access_count.values() if n > 0)
        completed = sum(1 for t in practice_count.values() if t.completed > 0)

        summary = Summary(
            total_visits=grouping.visits,
            total_materials_available=len(catalog),
            total_materials_accessed=grouping.material_events,
            material_access_count=material_access_count,
            total_practices_available=len(codes),
            total_practice_attempts=grouping.practice_attempts,
            total_practices_completed=grouping.practice_completions,
            practice_count=practice_count,
            accessed_materials_count=accessed,
            completed_practices_count=completed,
            completion_rate_materials=rate(accessed, len(catalog)),
            completion_rate_practices=rate(completed, len(codes)),
        )

    logger.debug(
        "Summary computed user=%s materials=%d/%d practices=%d/%d",
        uid,
        accessed,
        len(catalog),
        completed,
        len(codes),
        extra={"user_id": str(uid), "report": "summary"},
    )
    return summary


async def compute_progress(
    user_id: str | UUID,
    *,
    events: EventRepo,
    materials: MaterialRepo,
    practices: PracticeRepo,
) -> Progress:
    """Scalar-only report for one user.

    Only the distinct keys the user touched are fetched, never per-item
    counts.  Touched keys are intersected with the current catalog so the
    numbers match compute_summary() over the same snapshot.
    """
    uid = parse_id(user_id, what="User")

    with REPORT_DURATION.labels(report="progress").time():
        catalog, codes, touched = await asyncio.gather(
            materials.list_all(),
            practices.list_distinct_codes(),
            events.touched_keys_for_user(uid),
        )

        catalog_ids = {m.id for m in catalog}
        accessed = len(touched.materials & catalog_ids)
        completed = len(touched.completed_codes & set(codes))

        progress = Progress(
            total_materials_available=len(catalog_ids),
            accessed_materials_count=accessed,
            total_practices_available=len(codes),
            completed_practices_count=completed,
            completion_rate_materials=rate(accessed, len(catalog_ids)),
            completion_rate_practices=rate(completed, len(codes)),
        )

    logger.debug(
        "Progress computed user=%s materials=%d/%d practices=%d/%d",
        uid,
        accessed,
        len(catalog_ids),
        completed,
        len(codes),
        extra={"user_id": str(uid), "report": "progress"},
    )
    return progress


async def record_event(
    user_id: str | UUID,
    event_type: str,
    data: dict,
    *,
    events: EventRepo,
) -> Event:
    """Validate and append one client-tracked event.

    practice_completed is rejected here: it is only ever written by
    practice submission.
    """
    uid = parse_id(user_id, what="User")
    kind = parse_event_type(event_type)
    if kind not in TRACKABLE_TYPES:
        logger.warning("Rejected untrackable event type=%s user=%s", kind.value, uid)
        raise ValidationError("Invalid statistic type")

    try:
        payload = parse_payload(kind, data)
    except ValidationError as e:
        logger.warning(
            "Rejected %s event user=%s: %s", kind.value, uid, e.message
        )
        raise

    event = Event.new(event_type=kind, payload=payload, user_id=uid)
    await events.insert(event)
    EVENTS_RECORDED.labels(event_type=kind.value).inc()
    logger.info(
        "Recorded %s event id=%s user=%s",
        kind.value,
        event.id,
        uid,
        extra={"user_id": str(uid), "event_type": kind.value},
    )
    return event


async def list_events(user_id: str | UUID, *, events: EventRepo) -> list[Event]:
    """All events of one user, newest first."""
    uid = parse_id(user_id, what="User")
    found = await events.find_by_user(uid)
    # Reversed first so same-timestamp events still come out newest first
    return sorted(reversed(found), key=lambda e: e.created_at, reverse=True)
