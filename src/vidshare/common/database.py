"""Async SQLAlchemy engine and session management."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from vidshare.common.config import Settings, settings


def engine_options(config: Settings) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` derived from settings.

    SQLite (used by the test suite) runs on a single-connection pool and
    rejects the queue pool sizing arguments.
    """
    options: dict[str, Any] = {"echo": config.db_echo}
    if not config.is_sqlite:
        options["pool_size"] = config.db_pool_size
        options["max_overflow"] = config.db_max_overflow
        options["pool_pre_ping"] = True
    return options


def create_engine_from_settings(config: Settings = settings) -> AsyncEngine:
    return create_async_engine(config.database_url, **engine_options(config))


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Return a cached async engine (created on first call)."""
    return create_engine_from_settings(settings)


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return a cached session factory bound to the cached engine."""
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


def reset_database() -> None:
    """Clear cached engine and session factory so they are re-created on next use."""
    get_engine.cache_clear()
    get_session_factory.cache_clear()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
