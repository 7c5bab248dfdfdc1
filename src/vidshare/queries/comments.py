"""Comment threads: paged listing, creation, removal and reactions."""

import uuid
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import Row, String, func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from vidshare.common.models import (
    REACTION_DISLIKE,
    REACTION_LIKE,
    Comment,
    CommentReaction,
    CommentResponse,
    User,
    UserResponse,
)
from vidshare.pagination import Cursor, Keyset, Page, SortKey, fetch_page
from vidshare.queries.videos import toggle_reaction

logger = structlog.get_logger()

_Reply = aliased(Comment)


def _reaction_count(reaction: str) -> Any:
    return (
        select(func.count())
        .select_from(CommentReaction)
        .where(CommentReaction.comment_id == Comment.id, CommentReaction.type == reaction)
        .correlate(Comment)
        .scalar_subquery()
    )


REPLY_COUNT = (
    select(func.count()).select_from(_Reply).where(_Reply.parent_id == Comment.id).correlate(Comment).scalar_subquery()
)
LIKE_COUNT = _reaction_count(REACTION_LIKE)
DISLIKE_COUNT = _reaction_count(REACTION_DISLIKE)

BY_UPDATED = Keyset(
    SortKey.of("updatedAt", Comment.updated_at, datetime, "Comment.updated_at"),
    SortKey.of("id", Comment.id, uuid.UUID, "Comment.id"),
)


def comment_item(row: Row[Any]) -> CommentResponse:
    comment: Comment = row.Comment
    return CommentResponse(
        id=comment.id,
        parent_id=comment.parent_id,
        video_id=comment.video_id,
        value=comment.value,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        user=UserResponse.model_validate(row.User),
        viewer_reaction=row.viewer_reaction,
        reply_count=row.reply_count,
        like_count=row.like_count,
        dislike_count=row.dislike_count,
    )


async def count_comments(db: AsyncSession, video_id: uuid.UUID) -> int:
    """Every comment on the video, replies included."""
    result = await db.execute(select(func.count()).select_from(Comment).where(Comment.video_id == video_id))
    return result.scalar() or 0


async def list_comments(
    db: AsyncSession,
    video_id: uuid.UUID,
    *,
    limit: int,
    cursor: Cursor | None = None,
    parent_id: uuid.UUID | None = None,
    viewer_id: uuid.UUID | None = None,
) -> Page[Row[Any]]:
    """Top-level comments of a video, or the replies to ``parent_id``."""
    if viewer_id is None:
        viewer_reaction = literal(None, String)
    else:
        viewer_reaction = (
            select(CommentReaction.type)
            .where(CommentReaction.comment_id == Comment.id, CommentReaction.user_id == viewer_id)
            .correlate(Comment)
            .scalar_subquery()
        )

    stmt = (
        select(
            Comment,
            User,
            viewer_reaction.label("viewer_reaction"),
            REPLY_COUNT.label("reply_count"),
            LIKE_COUNT.label("like_count"),
            DISLIKE_COUNT.label("dislike_count"),
        )
        .join(User, Comment.user_id == User.id)
        .where(Comment.video_id == video_id)
    )
    if parent_id is not None:
        stmt = stmt.where(Comment.parent_id == parent_id)
    else:
        stmt = stmt.where(Comment.parent_id.is_(None))
    return await fetch_page(db, stmt, BY_UPDATED, limit=limit, cursor=cursor)


async def get_comment(db: AsyncSession, comment_id: uuid.UUID) -> Comment | None:
    return await db.get(Comment, comment_id)


async def create_comment(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    video_id: uuid.UUID,
    value: str,
    parent_id: uuid.UUID | None = None,
) -> Comment:
    comment = Comment(user_id=user_id, video_id=video_id, value=value, parent_id=parent_id)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    logger.info("comment_created", comment_id=str(comment.id), video_id=str(video_id), reply=parent_id is not None)
    return comment


async def delete_comment(db: AsyncSession, comment_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    """Delete the user's own comment. Returns False when there is nothing to delete."""
    result = await db.execute(select(Comment).where(Comment.id == comment_id, Comment.user_id == user_id))
    comment = result.scalar_one_or_none()
    if comment is None:
        return False
    await db.delete(comment)
    await db.commit()
    return True


async def react_to_comment(
    db: AsyncSession, comment_id: uuid.UUID, viewer_id: uuid.UUID, reaction: str
) -> str | None:
    return await toggle_reaction(db, CommentReaction, {"user_id": viewer_id, "comment_id": comment_id}, reaction)


async def comment_reaction_counts(db: AsyncSession, comment_id: uuid.UUID) -> tuple[int, int]:
    row = (await db.execute(select(LIKE_COUNT, DISLIKE_COUNT).where(Comment.id == comment_id))).one()
    return row[0], row[1]
