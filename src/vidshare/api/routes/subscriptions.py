"""Subscriptions endpoint: follow and unfollow creators."""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.auth import require_user
from vidshare.api.deps import get_db
from vidshare.api.pagination import PageParams, PaginatedResponse
from vidshare.common.models import SubscriptionRequest, SubscriptionResponse, User
from vidshare.queries import subscriptions, users

logger = structlog.get_logger()
router = APIRouter()


@router.get("/subscriptions", response_model=PaginatedResponse[SubscriptionResponse])
async def list_subscriptions(
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """Creators the caller subscribes to, most recently subscribed first."""
    result = await subscriptions.list_subscriptions(
        db, user.id, limit=page.limit, cursor=page.cursor_for(subscriptions.BY_UPDATED)
    )
    return PaginatedResponse[SubscriptionResponse].from_page(
        result, subscriptions.BY_UPDATED, subscriptions.subscription_item
    )


@router.post("/subscriptions", response_model=SubscriptionResponse, status_code=201)
async def subscribe(
    request: SubscriptionRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if request.user_id == user.id:
        raise HTTPException(status_code=400, detail="Cannot subscribe to yourself")
    if await users.get_user(db, request.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    sub = await subscriptions.subscribe(db, user.id, request.user_id)
    return SubscriptionResponse.model_validate(sub)


@router.delete("/subscriptions/{creator_id}", response_model=SubscriptionResponse)
async def unsubscribe(
    creator_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if creator_id == user.id:
        raise HTTPException(status_code=400, detail="Cannot unsubscribe from yourself")

    sub = await subscriptions.unsubscribe(db, user.id, creator_id)
    if sub is None:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return SubscriptionResponse.model_validate(sub)
