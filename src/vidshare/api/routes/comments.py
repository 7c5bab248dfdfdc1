"""Comments endpoint: paged threads, posting and deleting."""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.auth import get_viewer, require_user
from vidshare.api.deps import get_db
from vidshare.api.pagination import CountedPaginatedResponse, PageParams
from vidshare.common.models import CommentCreateRequest, CommentResponse, MessageResponse, User, UserResponse
from vidshare.queries import comments, videos

logger = structlog.get_logger()
router = APIRouter()


@router.get("/comments", response_model=CountedPaginatedResponse[CommentResponse])
async def list_comments(
    video_id: uuid.UUID,
    parent_id: uuid.UUID | None = None,
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_viewer),
):
    """Top-level comments of a video (or replies to ``parent_id``), plus the video's total comment count."""
    cursor = page.cursor_for(comments.BY_UPDATED)
    if await videos.get_video(db, video_id) is None:
        raise HTTPException(status_code=404, detail="Video not found")

    total = await comments.count_comments(db, video_id)
    result = await comments.list_comments(
        db,
        video_id,
        limit=page.limit,
        cursor=cursor,
        parent_id=parent_id,
        viewer_id=viewer.id if viewer else None,
    )
    return CountedPaginatedResponse[CommentResponse].from_page(
        result, comments.BY_UPDATED, comments.comment_item, total_count=total
    )


@router.post("/comments", response_model=CommentResponse, status_code=201)
async def create_comment(
    request: CommentCreateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if await videos.get_video(db, request.video_id) is None:
        raise HTTPException(status_code=404, detail="Video not found")

    if request.parent_id is not None:
        parent = await comments.get_comment(db, request.parent_id)
        if parent is None or parent.video_id != request.video_id:
            raise HTTPException(status_code=404, detail="Parent comment not found")
        if parent.parent_id is not None:
            raise HTTPException(status_code=400, detail="Cannot reply to a reply")

    comment = await comments.create_comment(
        db,
        user_id=user.id,
        video_id=request.video_id,
        value=request.value,
        parent_id=request.parent_id,
    )
    return CommentResponse(
        id=comment.id,
        parent_id=comment.parent_id,
        video_id=comment.video_id,
        value=comment.value,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        user=UserResponse.model_validate(user),
    )


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if not await comments.delete_comment(db, comment_id, user.id):
        raise HTTPException(status_code=404, detail="Comment not found")
    return MessageResponse(message="Comment deleted")
