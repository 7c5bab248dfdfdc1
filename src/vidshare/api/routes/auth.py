"""Auth routes: development login and current-user profile."""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.auth import create_access_token, require_user
from vidshare.api.deps import get_db
from vidshare.common.config import settings
from vidshare.common.models import TokenResponse, User, UserResponse
from vidshare.queries.users import get_or_create_user

logger = structlog.get_logger()

router = APIRouter()


class DevLoginRequest(BaseModel):
    """Dev-only: log in as an identity-provider account without the provider."""

    auth_id: str = Field(min_length=1, max_length=200)
    name: str = "Dev User"


@router.post("/auth/dev-login", response_model=TokenResponse)
async def dev_login(
    request: DevLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Issue a token for ``auth_id``, creating the local user if needed. Disabled in production."""
    if not settings.dev_login_enabled:
        raise HTTPException(status_code=403, detail="Dev login disabled")

    user = await get_or_create_user(db, request.auth_id, request.name)
    token = create_access_token(user.auth_id, user.name)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get("/auth/me", response_model=UserResponse)
async def get_me(user: User = Depends(require_user)):
    return UserResponse.model_validate(user)
