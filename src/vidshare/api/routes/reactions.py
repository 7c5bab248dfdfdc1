"""Like/dislike toggles for videos and comments."""

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.auth import require_user
from vidshare.api.deps import get_db
from vidshare.common.models import ReactionResponse, User
from vidshare.queries import comments, videos

router = APIRouter()

Reaction = Literal["like", "dislike"]


@router.post("/videos/{video_id}/reactions/{reaction}", response_model=ReactionResponse)
async def react_to_video(
    video_id: uuid.UUID,
    reaction: Reaction,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """Toggle the caller's reaction: repeating it clears it, the other one replaces it."""
    if await videos.get_video(db, video_id) is None:
        raise HTTPException(status_code=404, detail="Video not found")

    state = await videos.react_to_video(db, video_id, user.id, reaction)
    likes, dislikes = await videos.video_reaction_counts(db, video_id)
    return ReactionResponse(type=state, like_count=likes, dislike_count=dislikes)


@router.post("/comments/{comment_id}/reactions/{reaction}", response_model=ReactionResponse)
async def react_to_comment(
    comment_id: uuid.UUID,
    reaction: Reaction,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if await comments.get_comment(db, comment_id) is None:
        raise HTTPException(status_code=404, detail="Comment not found")

    state = await comments.react_to_comment(db, comment_id, user.id, reaction)
    likes, dislikes = await comments.comment_reaction_counts(db, comment_id)
    return ReactionResponse(type=state, like_count=likes, dislike_count=dislikes)
