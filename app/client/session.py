"""
Client view of the signed session.
"""

from enum import Enum
from typing import Any, Dict, Optional

from app.client.api_client import ApiClient
from app.core.logging import get_logger

logger = get_logger(__name__)


class SessionStatus(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class SessionHolder:
    """
    Holds the session identity {id, username, image} shown to every page.

    After any mutation that changes username or image, controllers call
    ``update()`` so the held identity is re-read from the user record.
    """

    def __init__(self, api: ApiClient, user: Optional[Dict[str, Any]] = None):
        self.api = api
        self.user = user
        self.expires: Optional[str] = None
        self.status = SessionStatus.AUTHENTICATED if user else SessionStatus.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED and self.user is not None

    def _store(self, data: Optional[Dict[str, Any]]) -> None:
        if data:
            self.user = data["user"]
            self.expires = data.get("expires")
            self.status = SessionStatus.AUTHENTICATED
        else:
            self.user = None
            self.expires = None
            self.status = SessionStatus.UNAUTHENTICATED

    async def load(self) -> Optional[Dict[str, Any]]:
        """Read the current session from the server."""
        self._store(await self.api.get_session())
        return self.user

    async def sign_in(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        self._store(await self.api.sign_in(email, password))
        return self.user

    async def update(self) -> Optional[Dict[str, Any]]:
        """Re-issue the session so it matches the user record."""
        self._store(await self.api.refresh_session())
        logger.debug(f"Session refreshed for {self.user['username']}")
        return self.user

    async def sign_out(self) -> None:
        try:
            await self.api.sign_out()
        finally:
            self._store(None)
