"""Async SQLAlchemy engine and session management for the document store."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from lhtrpg.config import Settings, get_settings

from .models.base import Base

logger = structlog.get_logger(__name__)

# One store per process
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _ensure_sqlite_directory(database_url: str) -> None:
    if not database_url.startswith("sqlite") or ":memory:" in database_url:
        return
    db_path = database_url.split("///")[-1]
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """
    Get the store's engine, creating it on first use.

    Args:
        settings: Settings to build the engine from; the cached application
            settings if omitted. Ignored once the engine exists.
    """
    global _engine

    if _engine is None:
        settings = settings or get_settings()
        _ensure_sqlite_directory(settings.database_url)
        _engine = create_async_engine(settings.database_url, echo=settings.debug)

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _async_session_factory

    if _async_session_factory is None:
        # Actors stay readable after the service commits a cascade
        _async_session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _async_session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Open a store session.

    Commits when the block finishes; on any error the session is rolled back
    and the error re-raised.

    Example:
        async with get_session() as session:
            prepared = await service.load_actor(session, actor_id)
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(settings: Settings | None = None) -> None:
    """Create the actor and item tables if they are missing."""
    engine = get_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("document_store_ready", url=engine.url.render_as_string(hide_password=True))


async def close_db() -> None:
    """Dispose of the engine so the next ``get_engine`` starts fresh."""
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
