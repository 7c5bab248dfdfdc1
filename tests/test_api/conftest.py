"""API test fixtures: app wired to the in-memory test database."""

import pytest
from httpx import ASGITransport, AsyncClient

from vidshare.api.auth import create_access_token
from vidshare.api.deps import get_db
from vidshare.api.main import create_app


@pytest.fixture
def app(db_session):
    """Create app with the database dependency pointed at the test session."""
    application = create_app()
    application.dependency_overrides[get_db] = lambda: db_session
    return application


@pytest.fixture
async def client(app):
    """Async test client that bypasses lifespan."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user."""

    def _headers(user) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.auth_id, user.name)}"}

    return _headers
