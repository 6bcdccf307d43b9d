import pytest

from app.api.dto.user_dto import LikeResultDTO, LinkDTO, MeDTO, ProfileViewDTO, UploadTargetDTO
from app.core.exceptions import AuthorizationError, IdentityNotFoundError, UsernameAlreadyTakenError
from app.domain.models.link import LinkType

pytestmark = pytest.mark.anyio("asyncio")


def make_me(**overrides) -> MeDTO:
    fields = {
        "id": "64b7f0c2a1b2c3d4e5f60718",
        "username": "qa-user",
        "email": "qa@example.com",
        "tagline": None,
    }
    fields.update(overrides)
    return MeDTO(**fields)


@pytest.mark.anyio
async def test_edit_profile_passes_only_non_blank_fields(async_client, monkeypatch, test_user):
    captured = {}

    async def fake_edit(user_id, request):
        captured["user_id"] = user_id
        captured["fields"] = request.model_dump(exclude_none=True)
        return make_me(username="new-name")

    monkeypatch.setattr("app.api.routers.user_router.user_service.edit_profile", fake_edit)

    response = await async_client.post(
        "/api/v1/user/edit", json={"username": "new-name", "tagline": "   "}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["statusCode"] == 200
    assert body["data"]["username"] == "new-name"
    assert "password" not in body["data"]
    assert captured == {"user_id": test_user.user_id, "fields": {"username": "new-name"}}


@pytest.mark.anyio
@pytest.mark.parametrize(
    "payload",
    [
        {"username": "ok-name", "bio": "unknown field"},
        {"username": "no spaces allowed"},
        {"username": "x"},
        {"tagline": "t" * 161},
    ],
)
async def test_edit_profile_rejects_malformed_payloads(async_client, monkeypatch, payload):
    async def fail_edit(user_id, request):
        raise AssertionError("service must not be called")

    monkeypatch.setattr("app.api.routers.user_router.user_service.edit_profile", fail_edit)

    response = await async_client.post("/api/v1/user/edit", json=payload)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["errorCode"] == "VALIDATION_ERROR"
    assert body["data"]["errors"]


@pytest.mark.anyio
async def test_edit_profile_username_conflict(async_client, monkeypatch):
    async def taken(user_id, request):
        raise UsernameAlreadyTakenError(request.username)

    monkeypatch.setattr("app.api.routers.user_router.user_service.edit_profile", taken)

    response = await async_client.post("/api/v1/user/edit", json={"username": "taken"})

    assert response.status_code == 409
    assert response.json()["errorCode"] == "USERNAME_TAKEN"


@pytest.mark.anyio
async def test_set_image_returns_upload_target(async_client, monkeypatch):
    async def fake_set_image(user_id):
        return UploadTargetDTO(url="https://storage.test/avatars/1?sig=abc", key=f"avatars/{user_id}")

    monkeypatch.setattr("app.api.routers.user_router.user_service.set_image", fake_set_image)

    response = await async_client.post("/api/v1/user/image")

    assert response.status_code == 200
    assert response.json()["data"]["url"].startswith("https://storage.test/")


@pytest.mark.anyio
async def test_add_link_requires_http_url(async_client, monkeypatch):
    async def fake_add_link(user_id, request):
        return LinkDTO(id="link-1", url=str(request.url), type=LinkType.GITHUB)

    monkeypatch.setattr("app.api.routers.user_router.user_service.add_link", fake_add_link)

    ok = await async_client.post("/api/v1/user/links", json={"url": "https://github.com/ada"})
    bad = await async_client.post("/api/v1/user/links", json={"url": "not a url"})

    assert ok.status_code == 201
    assert ok.json()["data"]["type"] == "GITHUB"
    assert bad.status_code == 422


@pytest.mark.anyio
async def test_like_profile_returns_toggle_result(async_client, monkeypatch):
    async def fake_like(user_id, target_id):
        return LikeResultDTO(liked=True, like_count=6)

    monkeypatch.setattr("app.api.routers.user_router.user_service.like_profile", fake_like)

    response = await async_client.post("/api/v1/user/like", json={"id": "target-1"})

    assert response.status_code == 200
    assert response.json()["data"] == {"liked": True, "likeCount": 6}


@pytest.mark.anyio
async def test_like_own_profile_is_forbidden(async_client, monkeypatch):
    async def own_profile(user_id, target_id):
        raise AuthorizationError("You cannot like your own profile")

    monkeypatch.setattr("app.api.routers.user_router.user_service.like_profile", own_profile)

    response = await async_client.post("/api/v1/user/like", json={"id": "self"})

    assert response.status_code == 403
    assert response.json()["success"] is False


@pytest.mark.anyio
async def test_profile_view_for_visitor(async_client, monkeypatch, anonymous):
    seen = {}

    async def fake_profile(username, viewer_id):
        seen["viewer_id"] = viewer_id
        return ProfileViewDTO(
            id="user-2", username=username, image_url="/default-avatar.png", like_count=5
        )

    monkeypatch.setattr("app.api.routers.user_router.user_service.get_profile", fake_profile)

    response = await async_client.get("/api/v1/user/profile/ada")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["likeCount"] == 5
    assert data["authUserHasLiked"] is False
    assert seen["viewer_id"] is None


@pytest.mark.anyio
async def test_unknown_profile_is_404(async_client, monkeypatch):
    async def missing(username, viewer_id):
        raise IdentityNotFoundError(username)

    monkeypatch.setattr("app.api.routers.user_router.user_service.get_profile", missing)

    response = await async_client.get("/api/v1/user/profile/ghost")

    assert response.status_code == 404
    assert response.json()["errorCode"] == "IDENTITY_NOT_FOUND"


@pytest.mark.anyio
async def test_protected_route_without_session_points_to_login(async_client, anonymous):
    response = await async_client.get("/api/v1/user/me")

    assert response.status_code == 401
    body = response.json()
    assert body["errorCode"] == "AUTH_ERROR"
    assert body["data"]["login_path"] == "/login"
    assert body["data"]["register_path"] == "/register"
