"""Async SQLAlchemy engine and session factory.

With DATABASE_URL set (postgresql+asyncpg://...), this module exposes an
async engine, a session factory and a request-scoped session dependency.
Without it every export is None and the stores fall back to in-memory
repositories.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from edustats.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for every table in edustats.db.tables."""


if SETTINGS.database_url:
    engine = create_async_engine(
        SETTINGS.database_url,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )
    async_session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
else:
    engine = None
    async_session_factory = None


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session; commit on success, roll back on error."""
    if async_session_factory is None:
        raise RuntimeError(
            "DATABASE_URL is not configured; cannot create database session"
        )
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ping_database() -> bool:
    """Round-trip a trivial query.  Returns False on any connection error."""
    if engine is None:
        return False
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        logger.warning("Database ping failed", exc_info=True)
        return False
    return True


@asynccontextmanager
async def lifespan_db():
    if engine is None:
        logger.info("No DATABASE_URL configured; using in-memory repositories")
        yield
        return

    logger.info("Database engine created: %s", engine.url.render_as_string())
    yield
    await engine.dispose()
    logger.info("Database engine disposed")
