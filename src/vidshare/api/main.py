"""FastAPI application factory."""

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vidshare.api.deps import get_db
from vidshare.api.middleware import CORRELATION_HEADER, CorrelationIdMiddleware, RequestLoggingMiddleware
from vidshare.api.routes import (
    auth,
    categories,
    comments,
    playlists,
    reactions,
    search,
    studio,
    subscriptions,
    suggestions,
    videos,
)
from vidshare.common.config import settings
from vidshare.common.database import create_engine_from_settings
from vidshare.common.logging import configure_logging
from vidshare.pagination import InvalidCursorError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging(settings.log_level)

    engine = create_engine_from_settings(settings)
    app.state.db_engine = engine
    app.state.session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    if settings.dev_login_enabled:
        logger.warning(
            "dev_login_enabled",
            detail="POST /api/auth/dev-login issues tokens without an identity provider. "
            "Set DEV_LOGIN_ENABLED=false in production.",
        )

    yield

    # Shutdown
    await engine.dispose()


async def invalid_cursor_handler(request: Request, exc: InvalidCursorError) -> JSONResponse:
    logger.info("invalid_cursor", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=400, content={"detail": "Invalid cursor"})


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("integrity_conflict", path=request.url.path, error=str(exc.orig))
    return JSONResponse(status_code=409, content={"detail": "Conflict"})


async def database_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    logger.exception("database_error", path=request.url.path)
    return JSONResponse(status_code=503, content={"detail": "Database unavailable"})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Vidshare API",
        description="Video sharing backend with keyset-paginated feeds",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Middleware (outermost first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", CORRELATION_HEADER],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    app.add_exception_handler(InvalidCursorError, invalid_cursor_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(DBAPIError, database_error_handler)

    # Routes
    app.include_router(videos.router, prefix="/api", tags=["videos"])
    app.include_router(reactions.router, prefix="/api", tags=["reactions"])
    app.include_router(search.router, prefix="/api", tags=["search"])
    app.include_router(suggestions.router, prefix="/api", tags=["suggestions"])
    app.include_router(studio.router, prefix="/api", tags=["studio"])
    app.include_router(categories.router, prefix="/api", tags=["categories"])
    app.include_router(subscriptions.router, prefix="/api", tags=["subscriptions"])
    app.include_router(comments.router, prefix="/api", tags=["comments"])
    app.include_router(playlists.router, prefix="/api", tags=["playlists"])
    app.include_router(auth.router, prefix="/api", tags=["auth"])

    @app.get("/api/health")
    async def health(db: AsyncSession = Depends(get_db)):
        try:
            await db.execute(text("SELECT 1"))
            database = "up"
        except DBAPIError:
            logger.warning("health_check_db_failed", exc_info=True)
            database = "down"

        healthy = database == "up"
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "services": {"database": database},
            },
        )

    return app


app = create_app()
