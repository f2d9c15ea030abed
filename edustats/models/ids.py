from __future__ import annotations

from uuid import UUID

from edustats.core.errors import InvalidIdentifier


def parse_id(raw: str | UUID, *, what: str = "Resource") -> UUID:
    """Parse a path/payload identifier, or raise InvalidIdentifier.

    Only the structure is checked; whether the entity exists is the
    caller's concern.
    """
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(raw)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdentifier(f"{what} not found") from None
