"""Tracking events: the append-only source of truth for statistics.

The payload is a tagged union keyed by EventType.  parse_payload() is the
only place raw client data becomes a payload, so every stored event has
the shape its type demands and readers never re-validate.
"""

from __future__ import annotations

import datetime
import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID, uuid4

from edustats.core.errors import ValidationError


class EventType(str, enum.Enum):
    VISIT = "visit"
    MATERIAL = "material"
    PRACTICE_ATTEMPT = "practice_attempt"
    PRACTICE_COMPLETED = "practice_completed"


# Types a client may post directly; completions come from practice submission.
TRACKABLE_TYPES = frozenset(
    {EventType.VISIT, EventType.MATERIAL, EventType.PRACTICE_ATTEMPT}
)


@dataclass(frozen=True, slots=True)
class VisitPayload:
    pass


@dataclass(frozen=True, slots=True)
class MaterialPayload:
    material_ref: UUID
    title: str | None = None


@dataclass(frozen=True, slots=True)
class PracticeAttemptPayload:
    code: str


@dataclass(frozen=True, slots=True)
class PracticeCompletedPayload:
    code: str
    practice_ref: UUID


Payload = (
    VisitPayload | MaterialPayload | PracticeAttemptPayload | PracticeCompletedPayload
)

_PAYLOAD_TYPES: dict[EventType, type] = {
    EventType.VISIT: VisitPayload,
    EventType.MATERIAL: MaterialPayload,
    EventType.PRACTICE_ATTEMPT: PracticeAttemptPayload,
    EventType.PRACTICE_COMPLETED: PracticeCompletedPayload,
}


@dataclass(frozen=True, slots=True)
class Event:
    id: UUID
    event_type: EventType
    payload: Payload
    user_id: UUID
    created_at: datetime.datetime

    def __post_init__(self) -> None:
        expected = _PAYLOAD_TYPES[self.event_type]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.event_type.value} event cannot carry "
                f"{type(self.payload).__name__}"
            )

    @staticmethod
    def new(*, event_type: EventType, payload: Payload, user_id: UUID) -> Event:
        return Event(
            id=uuid4(),
            event_type=event_type,
            payload=payload,
            user_id=user_id,
            created_at=datetime.datetime.now(datetime.UTC),
        )


def parse_event_type(raw: str) -> EventType:
    try:
        return EventType(raw)
    except ValueError:
        raise ValidationError("Invalid statistic type") from None


def _ref(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


def parse_payload(event_type: EventType, data: Mapping[str, Any]) -> Payload:
    """Build the typed payload for *event_type* from client data.

    Raises ValidationError with a message naming the violated rule.
    """
    if event_type is EventType.VISIT:
        if data:
            raise ValidationError("Visit data must be empty")
        return VisitPayload()

    if event_type is EventType.MATERIAL:
        # "material" is the field name older clients send
        raw_ref = _ref(data, "materialRef", "material_ref", "material")
        if raw_ref is None:
            raise ValidationError("Material ID is required")
        try:
            material_ref = UUID(str(raw_ref))
        except ValueError:
            raise ValidationError("Material ID is invalid") from None
        title = data.get("title")
        if title is not None and not isinstance(title, str):
            raise ValidationError("Material title must be a string")
        return MaterialPayload(material_ref=material_ref, title=title)

    if event_type is EventType.PRACTICE_ATTEMPT:
        code = data.get("code")
        if not code or not isinstance(code, str):
            raise ValidationError("Practice code is required")
        return PracticeAttemptPayload(code=code)

    if event_type is EventType.PRACTICE_COMPLETED:
        code = data.get("code")
        if not code or not isinstance(code, str):
            raise ValidationError("Practice code is required")
        raw_ref = _ref(data, "practiceRef", "practice_ref", "practice")
        if raw_ref is None:
            raise ValidationError("Practice ID is required")
        try:
            practice_ref = UUID(str(raw_ref))
        except ValueError:
            raise ValidationError("Practice ID is invalid") from None
        return PracticeCompletedPayload(code=code, practice_ref=practice_ref)

    raise ValidationError("Invalid statistic type")


def payload_to_dict(payload: Payload) -> dict[str, Any]:
    """Wire/storage form of a payload (camelCase keys, ids as strings)."""
    if isinstance(payload, MaterialPayload):
        out: dict[str, Any] = {"materialRef": str(payload.material_ref)}
        if payload.title is not None:
            out["title"] = payload.title
        return out
    if isinstance(payload, PracticeAttemptPayload):
        return {"code": payload.code}
    if isinstance(payload, PracticeCompletedPayload):
        return {"code": payload.code, "practiceRef": str(payload.practice_ref)}
    return {}
