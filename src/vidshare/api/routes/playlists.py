"""Playlists endpoint: the caller's playlists, watch history and liked videos."""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.auth import require_user
from vidshare.api.deps import get_db
from vidshare.api.pagination import PageParams, PaginatedResponse
from vidshare.common.models import (
    MessageResponse,
    PlaylistCreateRequest,
    PlaylistMembershipResponse,
    PlaylistResponse,
    PlaylistVideoResponse,
    User,
    VideoResponse,
)
from vidshare.queries import playlists, videos

logger = structlog.get_logger()
router = APIRouter()


@router.get("/playlists", response_model=PaginatedResponse[PlaylistResponse])
async def list_playlists(
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    result = await playlists.list_playlists(db, user.id, limit=page.limit, cursor=page.cursor_for(playlists.BY_UPDATED))
    return PaginatedResponse[PlaylistResponse].from_page(result, playlists.BY_UPDATED, playlists.playlist_item)


@router.get("/playlists/for-video", response_model=PaginatedResponse[PlaylistMembershipResponse])
async def list_playlists_for_video(
    video_id: uuid.UUID,
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """The caller's playlists, each marked with whether it already contains ``video_id``."""
    result = await playlists.list_playlists_for_video(
        db, user.id, video_id, limit=page.limit, cursor=page.cursor_for(playlists.BY_UPDATED)
    )
    return PaginatedResponse[PlaylistMembershipResponse].from_page(
        result, playlists.BY_UPDATED, playlists.membership_item
    )


@router.get("/playlists/history", response_model=PaginatedResponse[VideoResponse])
async def list_history(
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """Videos the caller has watched, ordered by first watch (latest first)."""
    result = await playlists.list_history(db, user.id, limit=page.limit, cursor=page.cursor_for(playlists.BY_VIEWED))
    return PaginatedResponse[VideoResponse].from_page(result, playlists.BY_VIEWED, videos.video_item)


@router.get("/playlists/liked", response_model=PaginatedResponse[VideoResponse])
async def list_liked(
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """Videos the caller has liked, most recently liked first."""
    result = await playlists.list_liked(db, user.id, limit=page.limit, cursor=page.cursor_for(playlists.BY_LIKED))
    return PaginatedResponse[VideoResponse].from_page(result, playlists.BY_LIKED, videos.video_item)


@router.post("/playlists", response_model=PlaylistResponse, status_code=201)
async def create_playlist(
    request: PlaylistCreateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    playlist = await playlists.create_playlist(db, user.id, request.name, request.description)
    return PlaylistResponse.model_validate(playlist)


@router.get("/playlists/{playlist_id}", response_model=PlaylistResponse)
async def get_playlist(
    playlist_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    detail = await playlists.get_playlist_detail(db, playlist_id, user.id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Playlist not found")
    return detail


@router.delete("/playlists/{playlist_id}", response_model=MessageResponse)
async def delete_playlist(
    playlist_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    playlist = await playlists.get_owned_playlist(db, playlist_id, user.id)
    if playlist is None:
        raise HTTPException(status_code=404, detail="Playlist not found")
    await playlists.delete_playlist(db, playlist)
    return MessageResponse(message="Playlist deleted")


@router.get("/playlists/{playlist_id}/videos", response_model=PaginatedResponse[VideoResponse])
async def list_playlist_videos(
    playlist_id: uuid.UUID,
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    cursor = page.cursor_for(playlists.BY_ADDED)
    if await playlists.get_owned_playlist(db, playlist_id, user.id) is None:
        raise HTTPException(status_code=404, detail="Playlist not found")

    result = await playlists.list_playlist_videos(db, playlist_id, limit=page.limit, cursor=cursor)
    return PaginatedResponse[VideoResponse].from_page(result, playlists.BY_ADDED, videos.video_item)


@router.post("/playlists/{playlist_id}/videos/{video_id}", response_model=PlaylistVideoResponse, status_code=201)
async def add_playlist_video(
    playlist_id: uuid.UUID,
    video_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if await playlists.get_owned_playlist(db, playlist_id, user.id) is None:
        raise HTTPException(status_code=404, detail="Playlist not found")
    if await videos.get_video(db, video_id) is None:
        raise HTTPException(status_code=404, detail="Video not found")
    if await playlists.get_entry(db, playlist_id, video_id) is not None:
        raise HTTPException(status_code=409, detail="Video already in playlist")

    try:
        entry = await playlists.add_video(db, playlist_id, video_id)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Video already in playlist") from None
    return PlaylistVideoResponse.model_validate(entry)


@router.delete("/playlists/{playlist_id}/videos/{video_id}", response_model=PlaylistVideoResponse)
async def remove_playlist_video(
    playlist_id: uuid.UUID,
    video_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if await playlists.get_owned_playlist(db, playlist_id, user.id) is None:
        raise HTTPException(status_code=404, detail="Playlist not found")
    entry = await playlists.get_entry(db, playlist_id, video_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Video not in playlist")

    await playlists.remove_video(db, entry)
    return PlaylistVideoResponse.model_validate(entry)
