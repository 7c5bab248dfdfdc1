"""FastAPI dependency injection."""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.common.database import get_session_factory


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Session from the app's factory (set in lifespan), falling back to the cached one."""
    factory = getattr(request.app.state, "session_factory", None) or get_session_factory()
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
