"""Video listings, single-video reads, views and reactions."""

import uuid
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import Row, Select, String, and_, exists, false, func, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.common.models import (
    DRAFT_TITLE,
    REACTION_DISLIKE,
    REACTION_LIKE,
    STATUS_WAITING,
    VISIBILITY_PUBLIC,
    Comment,
    CreatorResponse,
    StudioVideoResponse,
    Subscription,
    User,
    UserResponse,
    Video,
    VideoDetailResponse,
    VideoReaction,
    VideoResponse,
    VideoView,
)
from vidshare.common.utils import LIKE_ESCAPE, contains_pattern
from vidshare.pagination import Cursor, Keyset, Page, SortKey, fetch_page
from vidshare.queries.users import SUBSCRIBER_COUNT

logger = structlog.get_logger()


def _count(model: Any, *conditions: Any) -> Any:
    return select(func.count()).select_from(model).where(*conditions).correlate(Video).scalar_subquery()


VIEW_COUNT = _count(VideoView, VideoView.video_id == Video.id)
LIKE_COUNT = _count(VideoReaction, VideoReaction.video_id == Video.id, VideoReaction.type == REACTION_LIKE)
DISLIKE_COUNT = _count(VideoReaction, VideoReaction.video_id == Video.id, VideoReaction.type == REACTION_DISLIKE)
COMMENT_COUNT = _count(Comment, Comment.video_id == Video.id)

# Newest first; most listings page this way.
BY_UPDATED = Keyset(
    SortKey.of("updatedAt", Video.updated_at, datetime, "Video.updated_at"),
    SortKey.of("id", Video.id, uuid.UUID, "Video.id"),
)

# Most viewed first; the view count is computed per row, not stored.
BY_VIEWS = Keyset(
    SortKey.of("viewCount", VIEW_COUNT, int, "view_count"),
    SortKey.of("id", Video.id, uuid.UUID, "Video.id"),
)

_VIDEO_COLUMNS = [c.key for c in Video.__table__.columns]


def video_select(*extra: Any) -> Select[Any]:
    """Videos joined to their author with view/like/dislike counts."""
    return select(
        Video,
        User,
        VIEW_COUNT.label("view_count"),
        LIKE_COUNT.label("like_count"),
        DISLIKE_COUNT.label("dislike_count"),
        *extra,
    ).join(User, Video.user_id == User.id)


def video_item(row: Row[Any], response: type[VideoResponse] = VideoResponse) -> VideoResponse:
    """Shape a ``video_select`` row; labelled extra columns land on matching fields."""
    data = {key: getattr(row.Video, key) for key in _VIDEO_COLUMNS}
    data.update({k: v for k, v in row._mapping.items() if k not in ("Video", "User")})
    data["user"] = UserResponse.model_validate(row.User)
    return response.model_validate(data)


def studio_item(row: Row[Any]) -> StudioVideoResponse:
    return video_item(row, StudioVideoResponse)  # type: ignore[return-value]


# ── Listings ────────────────────────────────────────────────────────────


async def list_videos(
    db: AsyncSession,
    *,
    limit: int,
    cursor: Cursor | None = None,
    user_id: uuid.UUID | None = None,
    category_id: uuid.UUID | None = None,
) -> Page[Row[Any]]:
    stmt = video_select().where(Video.visibility == VISIBILITY_PUBLIC)
    if user_id is not None:
        stmt = stmt.where(Video.user_id == user_id)
    if category_id is not None:
        stmt = stmt.where(Video.category_id == category_id)
    return await fetch_page(db, stmt, BY_UPDATED, limit=limit, cursor=cursor)


async def list_trending(db: AsyncSession, *, limit: int, cursor: Cursor | None = None) -> Page[Row[Any]]:
    stmt = video_select().where(Video.visibility == VISIBILITY_PUBLIC)
    return await fetch_page(db, stmt, BY_VIEWS, limit=limit, cursor=cursor)


async def list_subscribed(
    db: AsyncSession, viewer_id: uuid.UUID, *, limit: int, cursor: Cursor | None = None
) -> Page[Row[Any]]:
    """Public videos from creators the viewer subscribes to."""
    stmt = (
        video_select()
        .join(
            Subscription,
            and_(Subscription.creator_id == Video.user_id, Subscription.viewer_id == viewer_id),
        )
        .where(Video.visibility == VISIBILITY_PUBLIC)
    )
    return await fetch_page(db, stmt, BY_UPDATED, limit=limit, cursor=cursor)


async def search_videos(
    db: AsyncSession,
    *,
    limit: int,
    cursor: Cursor | None = None,
    query: str | None = None,
    category_id: uuid.UUID | None = None,
) -> Page[Row[Any]]:
    stmt = video_select().where(Video.visibility == VISIBILITY_PUBLIC)
    if query:
        stmt = stmt.where(Video.title.ilike(contains_pattern(query), escape=LIKE_ESCAPE))
    if category_id is not None:
        stmt = stmt.where(Video.category_id == category_id)
    return await fetch_page(db, stmt, BY_UPDATED, limit=limit, cursor=cursor)


async def list_suggestions(
    db: AsyncSession, video: Video, *, limit: int, cursor: Cursor | None = None
) -> Page[Row[Any]]:
    """Other public videos, restricted to the same category when ``video`` has one."""
    stmt = video_select().where(Video.id != video.id, Video.visibility == VISIBILITY_PUBLIC)
    if video.category_id is not None:
        stmt = stmt.where(Video.category_id == video.category_id)
    return await fetch_page(db, stmt, BY_UPDATED, limit=limit, cursor=cursor)


async def list_studio(
    db: AsyncSession, owner_id: uuid.UUID, *, limit: int, cursor: Cursor | None = None
) -> Page[Row[Any]]:
    """All of the owner's videos regardless of visibility, with comment counts."""
    stmt = video_select(COMMENT_COUNT.label("comment_count")).where(Video.user_id == owner_id)
    return await fetch_page(db, stmt, BY_UPDATED, limit=limit, cursor=cursor)


# ── Single video ────────────────────────────────────────────────────────


async def get_video(db: AsyncSession, video_id: uuid.UUID) -> Video | None:
    return await db.get(Video, video_id)


async def get_owned_video(db: AsyncSession, video_id: uuid.UUID, owner_id: uuid.UUID) -> Video | None:
    result = await db.execute(select(Video).where(Video.id == video_id, Video.user_id == owner_id))
    return result.scalar_one_or_none()


async def get_video_detail(
    db: AsyncSession, video_id: uuid.UUID, viewer_id: uuid.UUID | None = None
) -> VideoDetailResponse | None:
    """A video with creator stats and the viewer's own reaction/subscription."""
    if viewer_id is None:
        viewer_reaction = literal(None, String)
        viewer_subscribed = false()
    else:
        viewer_reaction = (
            select(VideoReaction.type)
            .where(VideoReaction.video_id == Video.id, VideoReaction.user_id == viewer_id)
            .correlate(Video)
            .scalar_subquery()
        )
        viewer_subscribed = exists().where(
            Subscription.viewer_id == viewer_id, Subscription.creator_id == User.id
        )

    stmt = video_select(
        SUBSCRIBER_COUNT.label("subscriber_count"),
        viewer_subscribed.label("viewer_subscribed"),
        viewer_reaction.label("viewer_reaction"),
    ).where(Video.id == video_id)
    row = (await db.execute(stmt)).one_or_none()
    if row is None:
        return None

    data = {key: getattr(row.Video, key) for key in _VIDEO_COLUMNS}
    data.update(
        view_count=row.view_count,
        like_count=row.like_count,
        dislike_count=row.dislike_count,
        viewer_reaction=row.viewer_reaction,
        user=CreatorResponse(
            **UserResponse.model_validate(row.User).model_dump(),
            subscriber_count=row.subscriber_count,
            viewer_subscribed=bool(row.viewer_subscribed),
        ),
    )
    return VideoDetailResponse.model_validate(data)


async def create_video(db: AsyncSession, owner_id: uuid.UUID) -> Video:
    """Insert a private "Untitled" draft waiting for its upload to be processed."""
    video = Video(user_id=owner_id, title=DRAFT_TITLE, status=STATUS_WAITING)
    db.add(video)
    await db.commit()
    await db.refresh(video)
    logger.info("video_created", video_id=str(video.id), user_id=str(owner_id))
    return video


async def update_video(db: AsyncSession, video: Video, changes: dict[str, Any]) -> Video:
    for key, value in changes.items():
        setattr(video, key, value)
    await db.commit()
    await db.refresh(video)
    logger.info("video_updated", video_id=str(video.id), fields=sorted(changes))
    return video


async def delete_video(db: AsyncSession, video: Video) -> None:
    await db.delete(video)
    await db.commit()
    logger.info("video_deleted", video_id=str(video.id))


async def record_view(db: AsyncSession, video_id: uuid.UUID, viewer_id: uuid.UUID) -> VideoView:
    """Record that the viewer watched the video; repeat views are not counted."""
    existing = await db.get(VideoView, (viewer_id, video_id))
    if existing is not None:
        return existing
    view = VideoView(user_id=viewer_id, video_id=video_id)
    db.add(view)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request recorded the same view first.
        await db.rollback()
        existing = await db.get(VideoView, (viewer_id, video_id))
        if existing is None:
            raise
        return existing
    return view


# ── Reactions ───────────────────────────────────────────────────────────


async def toggle_reaction(db: AsyncSession, model: Any, key: dict[str, uuid.UUID], reaction: str) -> str | None:
    """Apply a like/dislike press to a reaction table and return the resulting state.

    Pressing the active reaction clears it; pressing the other one switches.
    """
    existing = await db.get(model, tuple(key.values()))
    if existing is not None and existing.type == reaction:
        await db.delete(existing)
        await db.commit()
        return None
    if existing is not None:
        existing.type = reaction
    else:
        db.add(model(**key, type=reaction))
    await db.commit()
    return reaction


async def react_to_video(db: AsyncSession, video_id: uuid.UUID, viewer_id: uuid.UUID, reaction: str) -> str | None:
    return await toggle_reaction(db, VideoReaction, {"user_id": viewer_id, "video_id": video_id}, reaction)


async def video_reaction_counts(db: AsyncSession, video_id: uuid.UUID) -> tuple[int, int]:
    row = (await db.execute(select(LIKE_COUNT, DISLIKE_COUNT).where(Video.id == video_id))).one()
    return row[0], row[1]
