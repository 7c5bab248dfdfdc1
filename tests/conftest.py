"""Shared test fixtures for the Vidshare test suite."""

import uuid
from collections.abc import AsyncGenerator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vidshare.common.models import (
    REACTION_LIKE,
    VISIBILITY_PUBLIC,
    Base,
    Category,
    Comment,
    Playlist,
    PlaylistVideo,
    Subscription,
    User,
    Video,
    VideoReaction,
    VideoView,
)


def sqlite_engine() -> AsyncEngine:
    """In-memory SQLite shared by every connection, with foreign keys enforced."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = sqlite_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


class ModelFactory:
    """Creates committed rows. Each row is stamped one minute after the previous one unless ``at`` is given."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._clock = datetime(2020, 1, 1, tzinfo=UTC)

    def tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    async def _save(self, obj, at: datetime | None):
        when = at or self.tick()
        obj.created_at = when
        obj.updated_at = when
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def user(self, name: str = "Alice", auth_id: str | None = None, **fields) -> User:
        return await self._save(User(auth_id=auth_id or f"auth_{uuid.uuid4().hex[:12]}", name=name, **fields), None)

    async def category(self, name: str = "Music") -> Category:
        return await self._save(Category(name=name), None)

    async def video(
        self,
        user: User,
        title: str = "A video",
        *,
        visibility: str = VISIBILITY_PUBLIC,
        category: Category | None = None,
        at: datetime | None = None,
        **fields,
    ) -> Video:
        video = Video(
            title=title,
            user_id=user.id,
            visibility=visibility,
            category_id=category.id if category else None,
            **fields,
        )
        return await self._save(video, at)

    async def view(self, user: User, video: Video, at: datetime | None = None) -> VideoView:
        return await self._save(VideoView(user_id=user.id, video_id=video.id), at)

    async def reaction(
        self, user: User, video: Video, type: str = REACTION_LIKE, at: datetime | None = None
    ) -> VideoReaction:
        return await self._save(VideoReaction(user_id=user.id, video_id=video.id, type=type), at)

    async def subscription(self, viewer: User, creator: User, at: datetime | None = None) -> Subscription:
        return await self._save(Subscription(viewer_id=viewer.id, creator_id=creator.id), at)

    async def comment(
        self,
        user: User,
        video: Video,
        value: str = "Nice video",
        *,
        parent: Comment | None = None,
        at: datetime | None = None,
    ) -> Comment:
        comment = Comment(user_id=user.id, video_id=video.id, value=value, parent_id=parent.id if parent else None)
        return await self._save(comment, at)

    async def playlist(self, user: User, name: str = "Favorites", at: datetime | None = None) -> Playlist:
        return await self._save(Playlist(user_id=user.id, name=name), at)

    async def playlist_video(self, playlist: Playlist, video: Video, at: datetime | None = None) -> PlaylistVideo:
        return await self._save(PlaylistVideo(playlist_id=playlist.id, video_id=video.id), at)


@pytest.fixture
def factory(db_session) -> ModelFactory:
    return ModelFactory(db_session)


@pytest.fixture
def first_lookup_misses(db_session):
    """Patch ``db_session.get`` so its first call finds nothing, as when a concurrent insert is not yet visible."""

    @contextmanager
    def _patched():
        real_get = db_session.get
        calls = 0

        async def get(*args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == 1:
                return None
            return await real_get(*args, **kwargs)

        db_session.expunge_all()
        with patch.object(db_session, "get", side_effect=get):
            yield

    return _patched
