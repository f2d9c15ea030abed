from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from edustats.core.errors import InvalidIdentifier
from edustats.models.ids import parse_id

# Roles allowed to read any learner's data.
ELEVATED_ROLES = frozenset({"admin", "teacher"})


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated JWT.

    user_id: the token subject, as issued
    role:    platform role, one of admin|teacher|student
    """

    user_id: str
    role: str

    def has_any_role(self, roles: set[str] | frozenset[str]) -> bool:
        return self.role in roles

    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES

    def is_user(self, user_id: UUID) -> bool:
        # Subjects are compared as UUIDs, so case and hyphenation don't matter.
        try:
            return parse_id(self.user_id, what="User") == user_id
        except InvalidIdentifier:
            return False

    def can_read_user(self, user_id: UUID) -> bool:
        """Students may read only their own data; staff may read anyone's."""
        return self.is_elevated() or self.is_user(user_id)
