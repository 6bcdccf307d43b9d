import pytest

from app.api.routers.auth_router import get_auth_service
from app.api.services.auth_service import AuthService, CredentialAuthenticator
from app.core.config import settings
from app.core.exceptions import EmailAlreadyRegisteredError
from app.core.security import SessionTokenManager, hash_password
from app.domain.models.user import IdentityModel
from app.main import app

pytestmark = pytest.mark.anyio("asyncio")


class InMemoryUsers:
    def __init__(self):
        self.users = {}

    async def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_by_id(self, user_id):
        return self.users.get(user_id)

    async def create(self, user):
        if await self.get_by_email(user.email):
            raise EmailAlreadyRegisteredError()
        identity = IdentityModel(id=f"user-{len(self.users) + 1}", **user.model_dump())
        self.users[identity.id] = identity
        return identity


@pytest.fixture
def users():
    repo = InMemoryUsers()
    repo.users["user-1"] = IdentityModel(
        id="user-1", username="ada", email="a@x.com", password=hash_password("correct")
    )
    service = AuthService(
        users=repo,
        authenticator=CredentialAuthenticator(repo),
        tokens=SessionTokenManager(secret_key="test-secret"),
    )
    app.dependency_overrides[get_auth_service] = lambda: service
    return repo


@pytest.mark.anyio
async def test_login_sets_cookie_and_returns_public_identity(async_client, users):
    response = await async_client.post(
        "/api/v1/auth/login", json={"email": "a@x.com", "password": "correct"}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"] == {"id": "user-1", "username": "ada", "image": None}
    assert data["token"]
    assert settings.SESSION_COOKIE_NAME in response.headers["set-cookie"]
    assert "httponly" in response.headers["set-cookie"].lower()


@pytest.mark.anyio
@pytest.mark.parametrize(
    "payload, message",
    [
        ({"email": "nobody@x.com", "password": "correct"}, "no such user"),
        ({"email": "a@x.com", "password": "wrong"}, "credential mismatch"),
        ({"email": "a@x.com"}, "credential mismatch"),
    ],
)
async def test_login_failures(async_client, users, payload, message):
    response = await async_client.post("/api/v1/auth/login", json=payload)

    assert response.status_code == 401
    body = response.json()
    assert body["errorCode"] == "AUTH_ERROR"
    assert body["message"] == message


@pytest.mark.anyio
async def test_session_read_and_refresh_with_bearer_token(async_client, users):
    login = await async_client.post(
        "/api/v1/auth/login", json={"email": "a@x.com", "password": "correct"}
    )
    token = login.json()["data"]["token"]
    headers = {"Authorization": f"Bearer {token}"}

    users.users["user-1"] = users.users["user-1"].model_copy(update={"username": "ada2"})

    session = await async_client.get("/api/v1/auth/session", headers=headers)
    refreshed = await async_client.post("/api/v1/auth/session/refresh", headers=headers)

    assert session.json()["data"]["user"]["username"] == "ada"
    assert refreshed.status_code == 200
    assert refreshed.json()["data"]["user"]["username"] == "ada2"


@pytest.mark.anyio
async def test_session_for_visitor_is_null(async_client, users):
    response = await async_client.get("/api/v1/auth/session")

    assert response.status_code == 200
    assert response.json()["data"] is None


@pytest.mark.anyio
async def test_register_then_duplicate_email(async_client, users):
    payload = {"email": "new@x.com", "username": "newbie", "password": "long-enough"}

    created = await async_client.post("/api/v1/auth/register", json=payload)
    duplicate = await async_client.post(
        "/api/v1/auth/register", json={**payload, "username": "other"}
    )
    short = await async_client.post(
        "/api/v1/auth/register",
        json={"email": "s@x.com", "username": "short", "password": "123"},
    )

    assert created.status_code == 201
    assert created.json()["data"]["username"] == "newbie"
    assert "password" not in created.json()["data"]
    assert duplicate.status_code == 409
    assert short.status_code == 422


@pytest.mark.anyio
async def test_logout_clears_cookie(async_client, users):
    response = await async_client.post("/api/v1/auth/logout")

    assert response.status_code == 200
    assert settings.SESSION_COOKIE_NAME in response.headers["set-cookie"]
