"""Video categories."""

import uuid
from collections.abc import Iterable

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.common.models import Category

logger = structlog.get_logger()

DEFAULT_CATEGORIES = [
    "Film & Animation",
    "Cars & Vehicles",
    "Music",
    "Pets & Animals",
    "Sports",
    "Travel & Events",
    "Gaming",
    "People & Blogs",
    "Comedy",
    "Entertainment",
    "News & Politics",
    "Howto & Style",
    "Education",
    "Science & Technology",
    "Nonprofits & Activism",
]


async def list_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())


async def get_category(db: AsyncSession, category_id: uuid.UUID) -> Category | None:
    return await db.get(Category, category_id)


async def seed_categories(db: AsyncSession, names: Iterable[str] = DEFAULT_CATEGORIES) -> int:
    """Insert any of ``names`` not already present. Returns how many were added."""
    existing = set((await db.execute(select(Category.name))).scalars().all())
    added = 0
    for name in names:
        if name in existing:
            continue
        db.add(Category(name=name, description=f"Videos related to {name.lower()}"))
        existing.add(name)
        added += 1
    await db.commit()
    logger.info("categories_seeded", added=added)
    return added
