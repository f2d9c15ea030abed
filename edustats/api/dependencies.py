from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from edustats.core.errors import Forbidden, Unauthenticated
from edustats.db.engine import async_session_factory, get_async_session
from edustats.models.principal import Principal
from edustats.repos.event_repo import EventRepo, InMemoryEventRepo
from edustats.repos.material_repo import InMemoryMaterialRepo, MaterialRepo
from edustats.repos.pg_event_repo import PgEventRepo
from edustats.repos.pg_material_repo import PgMaterialRepo
from edustats.repos.pg_practice_repo import PgPracticeRepo
from edustats.repos.pg_reaction_repo import PgReactionRepo
from edustats.repos.practice_repo import InMemoryPracticeRepo, PracticeRepo
from edustats.repos.reaction_repo import InMemoryReactionRepo, ReactionRepo
from edustats.services import token_service

logger = logging.getLogger(__name__)

# Tokens come from the platform login service; tokenUrl only feeds the docs UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login")


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer token and return the caller's Principal."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise Unauthenticated("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise Unauthenticated("Invalid token") from None

    principal = Principal(user_id=str(claims["sub"]), role=str(claims.get("role", "")))
    logger.debug("Token validated for user=%s role=%s", principal.user_id, principal.role)
    return principal


def require_any_role(roles: set[str]):
    """Dependency factory: demand one of the given roles, else 403.

    Usage: Depends(require_any_role({"admin", "teacher"}))
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_any_role(roles):
            logger.warning(
                "Access denied: user=%s role=%s required_any=%s",
                principal.user_id,
                principal.role,
                sorted(roles),
            )
            raise Forbidden()
        return principal

    return _guard


def ensure_can_read_user(principal: Principal, user_id: UUID) -> None:
    """Students see only their own data; admins and teachers see everyone's."""
    if not principal.can_read_user(user_id):
        logger.warning(
            "Access denied: user=%s role=%s tried to read user=%s",
            principal.user_id,
            principal.role,
            user_id,
        )
        raise Forbidden()


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------
# In-memory singletons serve when DATABASE_URL is unset (dev, tests).
# With a database, each store gets its own request-scoped session, so a
# report's concurrent reads never share one AsyncSession.

event_store = InMemoryEventRepo()
material_store = InMemoryMaterialRepo()
practice_store = InMemoryPracticeRepo()
reaction_store = InMemoryReactionRepo()


async def get_event_repo() -> AsyncGenerator[EventRepo, None]:
    if async_session_factory is None:
        yield event_store
        return
    async for session in get_async_session():
        yield PgEventRepo(session)


async def get_material_repo() -> AsyncGenerator[MaterialRepo, None]:
    if async_session_factory is None:
        yield material_store
        return
    async for session in get_async_session():
        yield PgMaterialRepo(session)


async def get_practice_repo() -> AsyncGenerator[PracticeRepo, None]:
    if async_session_factory is None:
        yield practice_store
        return
    async for session in get_async_session():
        yield PgPracticeRepo(session)


async def get_reaction_repo() -> AsyncGenerator[ReactionRepo, None]:
    if async_session_factory is None:
        yield reaction_store
        return
    async for session in get_async_session():
        yield PgReactionRepo(session)


EventStore = Annotated[EventRepo, Depends(get_event_repo)]
MaterialStore = Annotated[MaterialRepo, Depends(get_material_repo)]
PracticeStore = Annotated[PracticeRepo, Depends(get_practice_repo)]
ReactionStore = Annotated[ReactionRepo, Depends(get_reaction_repo)]
