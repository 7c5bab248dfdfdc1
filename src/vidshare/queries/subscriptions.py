"""Viewer → creator subscriptions."""

import uuid
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import Row, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.common.models import CreatorResponse, Subscription, SubscriptionResponse, User, UserResponse
from vidshare.pagination import Cursor, Keyset, Page, SortKey, fetch_page
from vidshare.queries.users import SUBSCRIBER_COUNT

logger = structlog.get_logger()

# One viewer subscribes to a creator at most once, so the creator id breaks ties.
BY_UPDATED = Keyset(
    SortKey.of("updatedAt", Subscription.updated_at, datetime, "Subscription.updated_at"),
    SortKey.of("creatorId", Subscription.creator_id, uuid.UUID, "Subscription.creator_id"),
)


def subscription_item(row: Row[Any]) -> SubscriptionResponse:
    sub: Subscription = row.Subscription
    return SubscriptionResponse(
        viewer_id=sub.viewer_id,
        creator_id=sub.creator_id,
        created_at=sub.created_at,
        updated_at=sub.updated_at,
        user=CreatorResponse(
            **UserResponse.model_validate(row.User).model_dump(),
            subscriber_count=row.subscriber_count,
            viewer_subscribed=True,
        ),
    )


async def list_subscriptions(
    db: AsyncSession, viewer_id: uuid.UUID, *, limit: int, cursor: Cursor | None = None
) -> Page[Row[Any]]:
    stmt = (
        select(Subscription, User, SUBSCRIBER_COUNT.label("subscriber_count"))
        .join(User, Subscription.creator_id == User.id)
        .where(Subscription.viewer_id == viewer_id)
    )
    return await fetch_page(db, stmt, BY_UPDATED, limit=limit, cursor=cursor)


async def subscribe(db: AsyncSession, viewer_id: uuid.UUID, creator_id: uuid.UUID) -> Subscription:
    """Subscribe the viewer to the creator; subscribing twice is a no-op."""
    existing = await db.get(Subscription, (viewer_id, creator_id))
    if existing is not None:
        return existing
    sub = Subscription(viewer_id=viewer_id, creator_id=creator_id)
    db.add(sub)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request subscribed first.
        await db.rollback()
        existing = await db.get(Subscription, (viewer_id, creator_id))
        if existing is None:
            raise
        return existing
    await db.refresh(sub)
    logger.info("subscription_created", viewer_id=str(viewer_id), creator_id=str(creator_id))
    return sub


async def unsubscribe(db: AsyncSession, viewer_id: uuid.UUID, creator_id: uuid.UUID) -> Subscription | None:
    existing = await db.get(Subscription, (viewer_id, creator_id))
    if existing is None:
        return None
    await db.delete(existing)
    await db.commit()
    logger.info("subscription_removed", viewer_id=str(viewer_id), creator_id=str(creator_id))
    return existing
