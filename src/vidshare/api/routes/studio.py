"""Studio endpoints: a creator's own videos, any visibility."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.auth import require_user
from vidshare.api.deps import get_db
from vidshare.api.pagination import PageParams, PaginatedResponse
from vidshare.common.models import StudioVideoResponse, User, VideoDetailResponse
from vidshare.queries import videos

router = APIRouter()


@router.get("/studio/videos", response_model=PaginatedResponse[StudioVideoResponse])
async def list_studio_videos(
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    result = await videos.list_studio(db, user.id, limit=page.limit, cursor=page.cursor_for(videos.BY_UPDATED))
    return PaginatedResponse[StudioVideoResponse].from_page(result, videos.BY_UPDATED, videos.studio_item)


@router.get("/studio/videos/{video_id}", response_model=VideoDetailResponse)
async def get_studio_video(
    video_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if await videos.get_owned_video(db, video_id, user.id) is None:
        raise HTTPException(status_code=404, detail="Video not found")
    return await videos.get_video_detail(db, video_id, user.id)
