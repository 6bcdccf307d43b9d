import os
import sys

import pytest
from httpx import ASGITransport, AsyncClient
from asgi_lifespan import LifespanManager

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)
os.environ.setdefault("ANYIO_BACKEND", "asyncio")

from app.main import app  # noqa: E402
from app.api.deps.auth_guard import (  # noqa: E402
    AuthenticatedUser,
    get_admin_user,
    get_current_user,
    get_optional_user,
)


@pytest.fixture
def anyio_backend():
    """The suite targets asyncio (see ``pytest.mark.anyio("asyncio")``)."""
    return os.environ["ANYIO_BACKEND"]


@pytest.fixture
def test_user() -> AuthenticatedUser:
    """Reusable authenticated user for dependency overrides."""
    return AuthenticatedUser(
        user_id="64b7f0c2a1b2c3d4e5f60718",
        username="qa-user",
        image=None,
    )


@pytest.fixture(autouse=True)
def override_auth_dependency(test_user: AuthenticatedUser):
    """
    Override the session dependencies so protected routes
    can be exercised without issuing real session tokens.
    """

    async def _override_current_user(request=None) -> AuthenticatedUser:
        return test_user

    app.dependency_overrides[get_current_user] = _override_current_user
    app.dependency_overrides[get_optional_user] = _override_current_user
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def as_admin(test_user: AuthenticatedUser):
    """Let admin routes through for ``test_user``."""

    async def _override_admin(request=None) -> AuthenticatedUser:
        test_user.admin = True
        return test_user

    app.dependency_overrides[get_admin_user] = _override_admin
    return test_user


@pytest.fixture
def anonymous():
    """Drop the auth overrides so routes see a visitor without a session."""
    app.dependency_overrides.pop(get_current_user, None)
    app.dependency_overrides.pop(get_optional_user, None)


@pytest.fixture
async def async_client():
    """Shared HTTPX async client with FastAPI lifespan handling."""
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
