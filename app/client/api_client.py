"""
Typed RPC client for the Profile Share API.

Every call validates its payload against the request DTO before anything is
sent, unwraps the response envelope and raises:

- ``ValidationError`` for malformed input (nothing dispatched)
- ``NetworkError`` when no response was received
- ``ServerError`` (or the matching auth error) for a failure envelope
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.api.dto.auth_dto import LoginRequestDTO
from app.api.dto.post_dto import ReportRequestDTO
from app.api.dto.user_dto import (
    AddLinkRequestDTO,
    EditProfileRequestDTO,
    TargetIdRequestDTO,
    UploadTargetDTO,
)
from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NetworkError,
    ServerError,
    ValidationError,
)
from app.core.logging import get_logger

logger = get_logger(__name__)

DTO = TypeVar("DTO", bound=BaseModel)


def validate_request(dto_cls: Type[DTO], payload: Dict[str, Any]) -> DTO:
    """
    Validate a request payload, rejecting unknown or malformed fields.

    Raises:
        ValidationError: With per-field ``errors`` in details
    """
    try:
        return dto_cls.model_validate(payload)
    except PydanticValidationError as e:
        errors = [
            {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
            for error in e.errors()
        ]
        raise ValidationError(f"Invalid {dto_cls.__name__} payload", details={"errors": errors})


class ApiClient:
    """Async client for the ``/api/v1`` RPC surface."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        token: Optional[str] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.http = http or httpx.AsyncClient(timeout=settings.CLIENT_TIMEOUT_SECONDS)
        self.token = token

    async def aclose(self) -> None:
        await self.http.aclose()

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def _call(
        self,
        method: str,
        path: str,
        body: Optional[BaseModel] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        json_body = body.model_dump(mode="json", exclude_none=True) if body is not None else None

        try:
            response = await self.http.request(
                method, url, json=json_body, params=params, headers=self._headers()
            )
        except httpx.TimeoutException as exc:
            logger.error(f"Request to {path} timed out: {exc}")
            raise NetworkError("Request timed out", details={"path": path})
        except httpx.TransportError as exc:
            logger.error(f"Failed to reach API at {url}: {exc}")
            raise NetworkError(details={"path": path})

        try:
            envelope = response.json()
        except ValueError:
            raise ServerError(
                f"Unexpected response from {path}",
                status_code=response.status_code,
                details={"body": response.text[:200]},
            )

        if not envelope.get("success", False):
            self._raise_for_envelope(envelope, response.status_code)
        return envelope.get("data")

    @staticmethod
    def _raise_for_envelope(envelope: Dict[str, Any], status_code: int) -> None:
        message = envelope.get("message") or "Request failed"
        error_code = envelope.get("errorCode") or "SERVER_ERROR"
        details = envelope.get("data") or {}

        if error_code == "VALIDATION_ERROR":
            raise ValidationError(message, details=details)
        if status_code == 401:
            raise AuthenticationError(message, details=details)
        if status_code == 403:
            raise AuthorizationError(message, details=details)
        raise ServerError(message, status_code=status_code, error_code=error_code, details=details)

    # Auth
    async def sign_in(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        body = validate_request(LoginRequestDTO, {"email": email, "password": password})
        data = await self._call("POST", "/auth/login", body)
        self.token = data["token"]
        return data

    async def get_session(self) -> Optional[Dict[str, Any]]:
        return await self._call("GET", "/auth/session")

    async def refresh_session(self) -> Dict[str, Any]:
        data = await self._call("POST", "/auth/session/refresh")
        self.token = data["token"]
        return data

    async def sign_out(self) -> None:
        try:
            await self._call("POST", "/auth/logout")
        finally:
            self.token = None

    # User
    async def get_me(self) -> Dict[str, Any]:
        return await self._call("GET", "/user/me")

    async def get_profile(self, username: str) -> Dict[str, Any]:
        return await self._call("GET", f"/user/profile/{username}")

    async def edit_profile(
        self, username: Optional[str] = None, tagline: Optional[str] = None
    ) -> Dict[str, Any]:
        body = validate_request(EditProfileRequestDTO, {"username": username, "tagline": tagline})
        return await self._call("POST", "/user/edit", body)

    async def set_image(self) -> UploadTargetDTO:
        data = await self._call("POST", "/user/image")
        return UploadTargetDTO.model_validate(data)

    async def upload_to_storage(self, url: str, content: bytes, content_type: str) -> None:
        """PUT bytes straight to a presigned storage URL (no envelope)."""
        try:
            response = await self.http.put(
                url, content=content, headers={"Content-Type": content_type}
            )
        except httpx.TransportError as exc:
            logger.error(f"Upload to storage failed: {exc}")
            raise NetworkError("Upload failed")

        if response.status_code >= 400:
            raise ServerError(
                "Upload rejected by storage",
                status_code=response.status_code,
                error_code="STORAGE_ERROR",
            )

    async def delete_image(self) -> None:
        await self._call("DELETE", "/user/image")

    async def delete_profile(self) -> None:
        await self._call("POST", "/user/delete")

    async def add_link(self, url: str) -> Dict[str, Any]:
        body = validate_request(AddLinkRequestDTO, {"url": url})
        return await self._call("POST", "/user/links", body)

    async def delete_link(self, link_id: str) -> None:
        await self._call("DELETE", f"/user/links/{link_id}")

    async def like_profile(self, target_id: str) -> Dict[str, Any]:
        body = validate_request(TargetIdRequestDTO, {"id": target_id})
        return await self._call("POST", "/user/like", body)

    # Posts
    async def get_latest_posts(self, skip: int = 0, limit: int = 20) -> List[Dict[str, Any]]:
        return await self._call("GET", "/post/latest", params={"skip": skip, "limit": limit})

    async def get_posts_all_types(self, username: str) -> List[Dict[str, Any]]:
        return await self._call("GET", f"/post/user/{username}")

    async def delete_post(self, post_id: str) -> None:
        body = validate_request(TargetIdRequestDTO, {"id": post_id})
        await self._call("POST", "/post/delete", body)

    async def report(self, report_type: str, target_id: str, reason: Optional[str] = None) -> str:
        body = validate_request(
            ReportRequestDTO, {"type": report_type, "id": target_id, "reason": reason}
        )
        data = await self._call("POST", "/post/report", body)
        return data["id"]

    # Admin
    async def admin_delete_user(self, user_id: str) -> None:
        body = validate_request(TargetIdRequestDTO, {"id": user_id})
        await self._call("POST", "/admin/user/delete", body)

    async def admin_delete_post(self, post_id: str) -> None:
        body = validate_request(TargetIdRequestDTO, {"id": post_id})
        await self._call("POST", "/admin/post/delete", body)
