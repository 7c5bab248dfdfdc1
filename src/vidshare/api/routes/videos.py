"""Videos endpoint: public feeds, single video, metadata edits and views."""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.auth import get_viewer, require_user
from vidshare.api.deps import get_db
from vidshare.api.pagination import PageParams, PaginatedResponse
from vidshare.common.models import MessageResponse, User, VideoDetailResponse, VideoResponse, VideoUpdateRequest
from vidshare.queries import categories, videos

logger = structlog.get_logger()
router = APIRouter()


@router.get("/videos", response_model=PaginatedResponse[VideoResponse])
async def list_videos(
    user_id: uuid.UUID | None = None,
    category_id: uuid.UUID | None = None,
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """Public videos, newest first, optionally for one creator or category."""
    result = await videos.list_videos(
        db,
        limit=page.limit,
        cursor=page.cursor_for(videos.BY_UPDATED),
        user_id=user_id,
        category_id=category_id,
    )
    return PaginatedResponse[VideoResponse].from_page(result, videos.BY_UPDATED, videos.video_item)


@router.post("/videos", response_model=VideoDetailResponse, status_code=201)
async def create_video(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """Create a private draft owned by the caller. The upload itself is handled elsewhere."""
    video = await videos.create_video(db, user.id)
    return await videos.get_video_detail(db, video.id, user.id)


@router.get("/videos/trending", response_model=PaginatedResponse[VideoResponse])
async def list_trending(
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """Public videos ranked by view count."""
    result = await videos.list_trending(db, limit=page.limit, cursor=page.cursor_for(videos.BY_VIEWS))
    return PaginatedResponse[VideoResponse].from_page(result, videos.BY_VIEWS, videos.video_item)


@router.get("/videos/subscribed", response_model=PaginatedResponse[VideoResponse])
async def list_subscribed(
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """Public videos from creators the caller subscribes to."""
    result = await videos.list_subscribed(db, user.id, limit=page.limit, cursor=page.cursor_for(videos.BY_UPDATED))
    return PaginatedResponse[VideoResponse].from_page(result, videos.BY_UPDATED, videos.video_item)


@router.get("/videos/{video_id}", response_model=VideoDetailResponse)
async def get_video(
    video_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_viewer),
):
    detail = await videos.get_video_detail(db, video_id, viewer.id if viewer else None)
    if detail is None:
        raise HTTPException(status_code=404, detail="Video not found")
    return detail


@router.patch("/videos/{video_id}", response_model=VideoDetailResponse)
async def update_video(
    video_id: uuid.UUID,
    request: VideoUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """Edit title, description, category or visibility of one of the caller's videos."""
    video = await videos.get_owned_video(db, video_id, user.id)
    if video is None:
        raise HTTPException(status_code=404, detail="Video not found")

    changes = request.model_dump(exclude_unset=True)
    for required in ("title", "visibility"):
        if required in changes and changes[required] is None:
            raise HTTPException(status_code=400, detail=f"{required.capitalize()} cannot be empty")
    if changes.get("category_id") is not None and await categories.get_category(db, changes["category_id"]) is None:
        raise HTTPException(status_code=400, detail="Unknown category")
    await videos.update_video(db, video, changes)

    return await videos.get_video_detail(db, video_id, user.id)


@router.delete("/videos/{video_id}", response_model=MessageResponse)
async def delete_video(
    video_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    video = await videos.get_owned_video(db, video_id, user.id)
    if video is None:
        raise HTTPException(status_code=404, detail="Video not found")
    await videos.delete_video(db, video)
    return MessageResponse(message="Video deleted")


@router.post("/videos/{video_id}/views", response_model=MessageResponse)
async def record_view(
    video_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if await videos.get_video(db, video_id) is None:
        raise HTTPException(status_code=404, detail="Video not found")
    await videos.record_view(db, video_id, user.id)
    return MessageResponse(message="View recorded")
