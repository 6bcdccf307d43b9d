"""
Session Authentication Guard for FastAPI.
Reads the signed session token from the cookie or bearer header and exposes the current identity.
"""

from typing import Optional

from fastapi import Request

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
    TokenExpiredError,
)
from app.core.logging import get_logger
from app.core.security import SessionTokenManager, session_token_manager
from app.domain.repositories.user_repository import user_repository

logger = get_logger(__name__)


class AuthenticatedUser:
    """Authenticated user data structure."""

    def __init__(self, user_id: str, username: str, image: Optional[str] = None):
        self.user_id = user_id
        self.username = username
        self.image = image
        self.admin: bool = False


class SessionAuthGuard:
    """Session guard: token extraction, verification and admin checks."""

    def __init__(self, tokens: Optional[SessionTokenManager] = None):
        self.tokens = tokens or session_token_manager

    def extract_session_token(self, request: Request) -> Optional[str]:
        """Session token from the cookie, falling back to ``Authorization: Bearer``."""
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
        if token:
            return token

        authorization = request.headers.get("authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            return credentials.strip()

        logger.debug(
            f"No session token on {request.method} {request.url.path}, "
            f"cookies: {list(request.cookies.keys())}"
        )
        return None

    def authenticate(self, request: Request) -> AuthenticatedUser:
        """
        Main authentication method.

        Raises:
            AuthenticationError: No token present; details carry the login path
            TokenExpiredError: Token past its expiry
            InvalidTokenError: Token signature or claims invalid
        """
        token = self.extract_session_token(request)
        if not token:
            raise AuthenticationError(
                "Session token is required",
                details={
                    "login_path": settings.LOGIN_PATH,
                    "register_path": settings.REGISTER_PATH,
                },
            )

        try:
            session = self.tokens.decode(token)
        except (TokenExpiredError, InvalidTokenError) as e:
            e.details.setdefault("login_path", settings.LOGIN_PATH)
            raise

        logger.debug(f"User {session.id} accessed {request.method} {request.url.path}")
        return AuthenticatedUser(
            user_id=session.id, username=session.username, image=session.image
        )

    async def require_admin(self, user: AuthenticatedUser) -> AuthenticatedUser:
        """Check the admin flag on the authoritative record."""
        record = await user_repository.get_by_id(user.user_id)
        if record is None or not record.admin:
            raise AuthorizationError("Admin access required")
        user.admin = True
        return user


# Global guard instance
session_auth_guard = SessionAuthGuard()


# Dependency functions for FastAPI
async def get_current_user(request: Request) -> AuthenticatedUser:
    """
    FastAPI dependency to get the current authenticated user.

    Raises:
        AuthenticationError: If no valid session is present
    """
    return session_auth_guard.authenticate(request)


async def get_optional_user(request: Request) -> Optional[AuthenticatedUser]:
    """Current user for pages that render differently for owners and visitors."""
    if not session_auth_guard.extract_session_token(request):
        return None
    try:
        return session_auth_guard.authenticate(request)
    except (TokenExpiredError, InvalidTokenError):
        return None


async def get_admin_user(request: Request) -> AuthenticatedUser:
    """Dependency for getting current admin user."""
    user = session_auth_guard.authenticate(request)
    return await session_auth_guard.require_admin(user)
