"""PostgreSQL access for the token store.

``engine`` and ``async_session_factory`` exist only when DATABASE_URL is
set; otherwise both are None and create_app falls back to
InMemoryTokenRepo.  Sessions are request-scoped: one per callback that
reaches the token upsert.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _create_engine(url: str) -> AsyncEngine:
    # Callbacks are rare and bursty; a small pool that re-validates idle
    # connections beats a large one that goes stale between bursts.
    return create_async_engine(
        url,
        echo=SETTINGS.is_dev,
        pool_size=2,
        max_overflow=8,
        pool_pre_ping=True,
    )


engine: AsyncEngine | None = (
    _create_engine(SETTINGS.database_url) if SETTINGS.database_url else None
)
async_session_factory: async_sessionmaker[AsyncSession] | None = (
    async_sessionmaker(engine, expire_on_commit=False) if engine is not None else None
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Commit when the caller finishes cleanly, roll back if it raises."""
    if async_session_factory is None:
        raise RuntimeError("DATABASE_URL is not configured; no session available")
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()


@asynccontextmanager
async def lifespan_db() -> AsyncGenerator[None, None]:
    if engine is None:
        logger.info("No DATABASE_URL configured; tokens are kept in memory")
        yield
        return

    logger.info(
        "Token store: %s", engine.url.render_as_string(hide_password=True)
    )
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Token store engine disposed")
