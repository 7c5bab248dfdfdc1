"""Categories endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_db
from vidshare.common.models import CategoryResponse
from vidshare.queries import categories

router = APIRouter()


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return [CategoryResponse.model_validate(c) for c in await categories.list_categories(db)]
