from datetime import datetime, timezone

import pytest

from app.api.dto.post_dto import PostDTO
from app.core.exceptions import AuthorizationError, PostNotFoundError
from app.domain.models.post import PostType, ReportType

pytestmark = pytest.mark.anyio("asyncio")


def make_post(post_id: str = "post-1") -> PostDTO:
    return PostDTO(
        id=post_id,
        user_id="user-2",
        username="ada",
        image=f"posts/user-2/{post_id}",
        image_url=f"https://img.test/posts/user-2/{post_id}",
        type=PostType.OUTFIT,
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


@pytest.mark.anyio
async def test_latest_posts_use_aliases(async_client, monkeypatch):
    captured = {}

    async def fake_latest(skip=0, limit=20):
        captured.update(skip=skip, limit=limit)
        return [make_post("post-1"), make_post("post-2")]

    monkeypatch.setattr("app.api.routers.post_router.post_service.get_latest_posts", fake_latest)

    response = await async_client.get("/api/v1/post/latest", params={"skip": 10, "limit": 2})

    assert response.status_code == 200
    data = response.json()["data"]
    assert [post["id"] for post in data] == ["post-1", "post-2"]
    assert data[0]["userId"] == "user-2"
    assert data[0]["imageUrl"].startswith("https://img.test/")
    assert captured == {"skip": 10, "limit": 2}


@pytest.mark.anyio
async def test_delete_post_by_owner(async_client, monkeypatch, test_user):
    deleted = []

    async def fake_delete(user_id, post_id):
        deleted.append((user_id, post_id))

    monkeypatch.setattr("app.api.routers.post_router.post_service.delete_post", fake_delete)

    response = await async_client.post("/api/v1/post/delete", json={"id": "post-1"})

    assert response.status_code == 200
    assert deleted == [(test_user.user_id, "post-1")]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "error, status_code, error_code",
    [
        (AuthorizationError("You can only delete your own posts"), 403, "AUTHZ_ERROR"),
        (PostNotFoundError("post-9"), 404, "POST_NOT_FOUND"),
    ],
)
async def test_delete_post_errors(async_client, monkeypatch, error, status_code, error_code):
    async def failing_delete(user_id, post_id):
        raise error

    monkeypatch.setattr("app.api.routers.post_router.post_service.delete_post", failing_delete)

    response = await async_client.post("/api/v1/post/delete", json={"id": "post-9"})

    assert response.status_code == status_code
    assert response.json()["errorCode"] == error_code


@pytest.mark.anyio
async def test_report_validates_type_and_fields(async_client, monkeypatch):
    reports = []

    async def fake_report(user_id, request):
        reports.append(request)
        return "report-1"

    monkeypatch.setattr("app.api.routers.post_router.post_service.report", fake_report)

    ok = await async_client.post(
        "/api/v1/post/report", json={"type": "POST", "id": "post-1", "reason": "spam"}
    )
    bad_type = await async_client.post("/api/v1/post/report", json={"type": "COMMENT", "id": "x"})
    extra = await async_client.post(
        "/api/v1/post/report", json={"type": "USER", "id": "x", "severity": "high"}
    )

    assert ok.status_code == 201
    assert ok.json()["data"] == {"id": "report-1"}
    assert reports[0].type is ReportType.POST
    assert bad_type.status_code == 422
    assert extra.status_code == 422
    assert len(reports) == 1


@pytest.mark.anyio
async def test_admin_routes_reject_non_admins(async_client, monkeypatch):
    async def not_admin(user):
        raise AuthorizationError("Admin access required")

    async def fail_delete(user_id):
        raise AssertionError("must not delete")

    monkeypatch.setattr(
        "app.api.deps.auth_guard.session_auth_guard.require_admin", not_admin
    )
    monkeypatch.setattr(
        "app.api.deps.auth_guard.session_auth_guard.authenticate",
        lambda request: None,
    )
    monkeypatch.setattr("app.api.routers.admin_router.user_service.delete_account", fail_delete)

    response = await async_client.post("/api/v1/admin/user/delete", json={"id": "user-2"})

    assert response.status_code == 403
    assert response.json()["errorCode"] == "AUTHZ_ERROR"


@pytest.mark.anyio
async def test_admin_delete_user_and_post(async_client, monkeypatch, as_admin):
    calls = []

    async def fake_delete_account(user_id):
        calls.append(("user", user_id))

    async def fake_admin_delete_post(admin_id, post_id):
        calls.append(("post", admin_id, post_id))

    monkeypatch.setattr(
        "app.api.routers.admin_router.user_service.delete_account", fake_delete_account
    )
    monkeypatch.setattr(
        "app.api.routers.admin_router.post_service.admin_delete_post", fake_admin_delete_post
    )

    user_response = await async_client.post("/api/v1/admin/user/delete", json={"id": "user-2"})
    post_response = await async_client.post("/api/v1/admin/post/delete", json={"id": "post-1"})

    assert user_response.status_code == 200
    assert post_response.status_code == 200
    assert calls == [("user", "user-2"), ("post", as_admin.user_id, "post-1")]
