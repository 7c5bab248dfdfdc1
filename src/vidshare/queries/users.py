"""User lookups and per-creator aggregates."""

import uuid

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.common.models import Subscription, User

logger = structlog.get_logger()

SUBSCRIBER_COUNT = (
    select(func.count())
    .select_from(Subscription)
    .where(Subscription.creator_id == User.id)
    .correlate(User)
    .scalar_subquery()
)


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_auth_id(db: AsyncSession, auth_id: str) -> User | None:
    result = await db.execute(select(User).where(User.auth_id == auth_id))
    return result.scalar_one_or_none()


async def get_or_create_user(db: AsyncSession, auth_id: str, name: str, image_url: str | None = None) -> User:
    """Find the local user for an identity-provider account, creating it on first sight."""
    user = await get_user_by_auth_id(db, auth_id)
    if user is not None:
        return user

    user = User(auth_id=auth_id, name=name, image_url=image_url)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("user_created", user_id=str(user.id), auth_id=auth_id)
    return user
