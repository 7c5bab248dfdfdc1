"""Suggestions endpoint: related videos shown next to the player."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_db
from vidshare.api.pagination import PageParams, PaginatedResponse
from vidshare.common.models import VideoResponse
from vidshare.queries import videos

router = APIRouter()


@router.get("/suggestions", response_model=PaginatedResponse[VideoResponse])
async def list_suggestions(
    video_id: uuid.UUID,
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    video = await videos.get_video(db, video_id)
    if video is None:
        raise HTTPException(status_code=404, detail="Video not found")

    result = await videos.list_suggestions(db, video, limit=page.limit, cursor=page.cursor_for(videos.BY_UPDATED))
    return PaginatedResponse[VideoResponse].from_page(result, videos.BY_UPDATED, videos.video_item)
