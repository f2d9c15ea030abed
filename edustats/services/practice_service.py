from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from edustats.core.errors import ValidationError
from edustats.core.metrics import EVENTS_RECORDED, PRACTICES_SUBMITTED
from edustats.models.event import Event, EventType, PracticeCompletedPayload
from edustats.models.ids import parse_id
from edustats.models.practice import Practice, Score
from edustats.repos.event_repo import EventRepo
from edustats.repos.practice_repo import PracticeRepo

logger = logging.getLogger(__name__)


async def submit_practice(
    user_id: str | UUID,
    code: str,
    correct: int,
    total: int,
    content: dict[str, Any] | None = None,
    *,
    practices: PracticeRepo,
    events: EventRepo,
) -> Practice:
    """Store a practice result and log its completion event.

    The completion event carries the practice code, which is what ties it
    to the practice-code universe in the statistics reports.
    """
    uid = parse_id(user_id, what="User")
    code = code.strip()
    if not code:
        raise ValidationError("Practice code is required")
    if correct < 0 or total < 0:
        logger.warning("Rejected negative score user=%s code=%s", uid, code)
        raise ValidationError("Score values must not be negative")

    practice = Practice.new(
        code=code,
        score=Score(correct=correct, total=total),
        user_id=uid,
        content=content,
    )
    await practices.add(practice)

    event = Event.new(
        event_type=EventType.PRACTICE_COMPLETED,
        payload=PracticeCompletedPayload(code=code, practice_ref=practice.id),
        user_id=uid,
    )
    await events.insert(event)

    PRACTICES_SUBMITTED.inc()
    EVENTS_RECORDED.labels(event_type=EventType.PRACTICE_COMPLETED.value).inc()
    logger.info(
        "Practice submitted id=%s user=%s code=%s score=%d/%d",
        practice.id,
        uid,
        code,
        correct,
        total,
    )
    return practice


async def list_practices(
    user_id: str | UUID, *, practices: PracticeRepo
) -> list[Practice]:
    """Practices of one user, newest first."""
    uid = parse_id(user_id, what="User")
    found = await practices.list_by_user(uid)
    return sorted(reversed(found), key=lambda p: p.created_at, reverse=True)
