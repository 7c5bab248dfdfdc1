"""JWT validation and viewer resolution.

Tokens are minted by the external identity provider (or by the dev-login
route outside production). Their ``sub`` claim is the provider's account ID,
which maps to ``users.auth_id``.
"""

from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_db
from vidshare.common.config import settings
from vidshare.common.models import User
from vidshare.queries.users import get_user_by_auth_id

logger = structlog.get_logger()

_bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(auth_id: str, name: str | None = None) -> str:
    """Create a signed JWT for the given identity-provider account."""
    now = datetime.now(UTC)
    payload = {
        "sub": auth_id,
        "name": name,
        "iat": now,
        "exp": now + timedelta(hours=settings.jwt_expiry_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and validate a JWT. Raises HTTPException on failure."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


async def get_viewer(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> User | None:
    """FastAPI dependency: the calling user, or None for anonymous requests.

    A token that is present but invalid is rejected rather than treated as
    anonymous. A valid token for an account with no local user resolves to None.
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    auth_id = payload.get("sub")
    if not auth_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    user = await get_user_by_auth_id(db, auth_id)
    if user is None:
        logger.info("viewer_unknown", auth_id=auth_id)
    return user


async def require_user(
    user: Annotated[User | None, Depends(get_viewer)],
) -> User:
    """FastAPI dependency: requires an authenticated, known user."""
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user
