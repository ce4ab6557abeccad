"""Database access for the certificate record store.

One async engine per process, created by ``init_engine()`` from the
database settings and torn down by ``close_engine()``. Schema changes for
managed deployments live in ``wipecert.db.migrations`` (Alembic);
``create_schema()`` covers SQLite and development setups.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from wipecert.db.models import Base

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from wipecert.core.config import DatabaseSettings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_sessions: async_sessionmaker[AsyncSession] | None = None


def init_engine(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """Create the process engine, or return it if it already exists.

    Args:
        settings: Database settings. Defaults to the application settings.

    Raises:
        RuntimeError: If an engine for a different URL is already open.
            Call close_engine() first to switch databases.
    """
    global _engine, _sessions

    if _engine is not None and settings is not None and make_url(settings.url) != _engine.url:
        msg = "Record store engine already bound to another database"
        raise RuntimeError(msg)

    if _engine is None:
        if settings is None:
            from wipecert.core.settings import get_settings

            settings = get_settings().database

        _engine = create_async_engine(settings.url, echo=settings.echo)
        _sessions = async_sessionmaker(_engine, expire_on_commit=False)
        logger.info(
            "Record store engine ready (%s)", _engine.url.render_as_string(hide_password=True)
        )
    return _engine


async def create_schema() -> None:
    async with init_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Record store schema ensured")


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Open a session; it is rolled back if the block raises.

    Callers commit explicitly.
    """
    init_engine()
    if _sessions is None:
        msg = "Record store session factory is not initialized"
        raise RuntimeError(msg)

    async with _sessions() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def close_engine() -> None:
    """Dispose of the engine; safe to call when none exists."""
    global _engine, _sessions

    if _engine is not None:
        await _engine.dispose()
        logger.info("Record store engine disposed")
    _engine = None
    _sessions = None
