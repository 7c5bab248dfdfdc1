"""Search endpoint: title search over public videos."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_db
from vidshare.api.pagination import PageParams, PaginatedResponse
from vidshare.common.models import VideoResponse
from vidshare.queries import videos

router = APIRouter()


@router.get("/search", response_model=PaginatedResponse[VideoResponse])
async def search(
    query: str | None = Query(default=None, max_length=200),
    category_id: uuid.UUID | None = None,
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """Public videos whose title contains ``query`` (case-insensitive), newest first."""
    result = await videos.search_videos(
        db,
        limit=page.limit,
        cursor=page.cursor_for(videos.BY_UPDATED),
        query=query,
        category_id=category_id,
    )
    return PaginatedResponse[VideoResponse].from_page(result, videos.BY_UPDATED, videos.video_item)
