"""Playlists, plus the per-viewer history and liked-videos collections."""

import uuid
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import Row, and_, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.common.models import (
    REACTION_LIKE,
    VISIBILITY_PUBLIC,
    Playlist,
    PlaylistMembershipResponse,
    PlaylistResponse,
    PlaylistVideo,
    Video,
    VideoReaction,
    VideoView,
)
from vidshare.pagination import Cursor, Keyset, Page, SortKey, fetch_page
from vidshare.queries.videos import video_select

logger = structlog.get_logger()

VIDEO_COUNT = (
    select(func.count())
    .select_from(PlaylistVideo)
    .where(PlaylistVideo.playlist_id == Playlist.id)
    .correlate(Playlist)
    .scalar_subquery()
)

# Cover image: thumbnail of the most recently added video.
COVER_THUMBNAIL = (
    select(Video.thumbnail_url)
    .join(PlaylistVideo, PlaylistVideo.video_id == Video.id)
    .where(PlaylistVideo.playlist_id == Playlist.id)
    .order_by(PlaylistVideo.updated_at.desc())
    .limit(1)
    .correlate(Playlist)
    .scalar_subquery()
)

BY_UPDATED = Keyset(
    SortKey.of("updatedAt", Playlist.updated_at, datetime, "Playlist.updated_at"),
    SortKey.of("id", Playlist.id, uuid.UUID, "Playlist.id"),
)

# Within one playlist a video appears once, so the video id breaks ties.
BY_ADDED = Keyset(
    SortKey.of("addedAt", PlaylistVideo.updated_at, datetime, "added_at"),
    SortKey.of("videoId", PlaylistVideo.video_id, uuid.UUID, "Video.id"),
)

BY_VIEWED = Keyset(
    SortKey.of("viewedAt", VideoView.updated_at, datetime, "viewed_at"),
    SortKey.of("id", Video.id, uuid.UUID, "Video.id"),
)

BY_LIKED = Keyset(
    SortKey.of("likedAt", VideoReaction.updated_at, datetime, "liked_at"),
    SortKey.of("id", Video.id, uuid.UUID, "Video.id"),
)


def playlist_item(row: Row[Any]) -> PlaylistResponse:
    playlist: Playlist = row.Playlist
    return PlaylistResponse(
        id=playlist.id,
        name=playlist.name,
        description=playlist.description,
        user_id=playlist.user_id,
        created_at=playlist.created_at,
        updated_at=playlist.updated_at,
        video_count=row.video_count,
        thumbnail_url=row.thumbnail_url,
    )


def membership_item(row: Row[Any]) -> PlaylistMembershipResponse:
    return PlaylistMembershipResponse(
        **playlist_item(row).model_dump(),
        contains_video=bool(row.contains_video),
    )


def _playlist_select(*extra: Any) -> Any:
    return select(Playlist, VIDEO_COUNT.label("video_count"), COVER_THUMBNAIL.label("thumbnail_url"), *extra)


def _visible_to(viewer_id: uuid.UUID) -> Any:
    return or_(Video.visibility == VISIBILITY_PUBLIC, Video.user_id == viewer_id)


# ── Listings ────────────────────────────────────────────────────────────


async def list_playlists(
    db: AsyncSession, owner_id: uuid.UUID, *, limit: int, cursor: Cursor | None = None
) -> Page[Row[Any]]:
    stmt = _playlist_select().where(Playlist.user_id == owner_id)
    return await fetch_page(db, stmt, BY_UPDATED, limit=limit, cursor=cursor)


async def list_playlists_for_video(
    db: AsyncSession,
    owner_id: uuid.UUID,
    video_id: uuid.UUID,
    *,
    limit: int,
    cursor: Cursor | None = None,
) -> Page[Row[Any]]:
    """The owner's playlists, each flagged with whether it already holds ``video_id``."""
    contains = exists().where(PlaylistVideo.playlist_id == Playlist.id, PlaylistVideo.video_id == video_id)
    stmt = _playlist_select(contains.label("contains_video")).where(Playlist.user_id == owner_id)
    return await fetch_page(db, stmt, BY_UPDATED, limit=limit, cursor=cursor)


async def list_playlist_videos(
    db: AsyncSession, playlist_id: uuid.UUID, *, limit: int, cursor: Cursor | None = None
) -> Page[Row[Any]]:
    """Videos of a playlist, most recently added first."""
    stmt = (
        video_select(PlaylistVideo.updated_at.label("added_at"))
        .join(PlaylistVideo, PlaylistVideo.video_id == Video.id)
        .where(PlaylistVideo.playlist_id == playlist_id)
    )
    return await fetch_page(db, stmt, BY_ADDED, limit=limit, cursor=cursor)


async def list_history(
    db: AsyncSession, viewer_id: uuid.UUID, *, limit: int, cursor: Cursor | None = None
) -> Page[Row[Any]]:
    stmt = (
        video_select(VideoView.updated_at.label("viewed_at"))
        .join(VideoView, and_(VideoView.video_id == Video.id, VideoView.user_id == viewer_id))
        .where(_visible_to(viewer_id))
    )
    return await fetch_page(db, stmt, BY_VIEWED, limit=limit, cursor=cursor)


async def list_liked(
    db: AsyncSession, viewer_id: uuid.UUID, *, limit: int, cursor: Cursor | None = None
) -> Page[Row[Any]]:
    stmt = (
        video_select(VideoReaction.updated_at.label("liked_at"))
        .join(
            VideoReaction,
            and_(
                VideoReaction.video_id == Video.id,
                VideoReaction.user_id == viewer_id,
                VideoReaction.type == REACTION_LIKE,
            ),
        )
        .where(_visible_to(viewer_id))
    )
    return await fetch_page(db, stmt, BY_LIKED, limit=limit, cursor=cursor)


# ── Single playlist ─────────────────────────────────────────────────────


async def get_owned_playlist(db: AsyncSession, playlist_id: uuid.UUID, owner_id: uuid.UUID) -> Playlist | None:
    result = await db.execute(select(Playlist).where(Playlist.id == playlist_id, Playlist.user_id == owner_id))
    return result.scalar_one_or_none()


async def get_playlist_detail(
    db: AsyncSession, playlist_id: uuid.UUID, owner_id: uuid.UUID
) -> PlaylistResponse | None:
    stmt = _playlist_select().where(Playlist.id == playlist_id, Playlist.user_id == owner_id)
    row = (await db.execute(stmt)).one_or_none()
    return playlist_item(row) if row is not None else None


async def create_playlist(
    db: AsyncSession, owner_id: uuid.UUID, name: str, description: str | None = None
) -> Playlist:
    playlist = Playlist(user_id=owner_id, name=name, description=description)
    db.add(playlist)
    await db.commit()
    await db.refresh(playlist)
    logger.info("playlist_created", playlist_id=str(playlist.id))
    return playlist


async def delete_playlist(db: AsyncSession, playlist: Playlist) -> None:
    await db.delete(playlist)
    await db.commit()
    logger.info("playlist_deleted", playlist_id=str(playlist.id))


async def get_entry(db: AsyncSession, playlist_id: uuid.UUID, video_id: uuid.UUID) -> PlaylistVideo | None:
    return await db.get(PlaylistVideo, (playlist_id, video_id))


async def add_video(db: AsyncSession, playlist_id: uuid.UUID, video_id: uuid.UUID) -> PlaylistVideo:
    entry = PlaylistVideo(playlist_id=playlist_id, video_id=video_id)
    db.add(entry)
    await db.commit()
    return entry


async def remove_video(db: AsyncSession, entry: PlaylistVideo) -> None:
    await db.delete(entry)
    await db.commit()
