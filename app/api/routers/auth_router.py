"""
Auth Router.
Registration, credential login, logout and session read/refresh endpoints.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Request, Response

from app.api.deps.auth_guard import session_auth_guard
from app.api.dto.auth_dto import (
    LoginDataDTO,
    LoginRequestDTO,
    RegisterRequestDTO,
    SessionDTO,
    SessionUserDTO,
)
from app.api.dto.common_dto import envelope
from app.api.services.auth_service import AuthService, auth_service
from app.core.config import settings
from app.core.exceptions import AuthenticationError, InvalidTokenError, TokenExpiredError
from app.core.logging import get_logger, log_session_operation
from app.domain.models.user import SessionUser

logger = get_logger(__name__)

router = APIRouter()


def get_auth_service() -> AuthService:
    """Dependency returning the auth service (overridable in tests)."""
    return auth_service


def set_session_cookie(response: Response, token: str, expires: datetime) -> None:
    """Write the session token cookie."""
    cookie_kwargs = {
        "key": settings.SESSION_COOKIE_NAME,
        "value": token,
        "expires": expires,
        "max_age": settings.SESSION_MAX_AGE_SECONDS,
        "secure": settings.COOKIE_SECURE,
        "httponly": settings.COOKIE_HTTPONLY,
        "samesite": settings.COOKIE_SAMESITE,
        "path": settings.COOKIE_PATH,
    }
    if settings.COOKIE_DOMAIN:
        cookie_kwargs["domain"] = settings.COOKIE_DOMAIN
    response.set_cookie(**cookie_kwargs)


def _login_data(token: str, session: SessionUser) -> LoginDataDTO:
    return LoginDataDTO(
        user=SessionUserDTO(id=session.id, username=session.username, image=session.image),
        token=token,
        expires=session.expires_at,
    )


@router.post("/register", status_code=201)
async def register(
    request: RegisterRequestDTO,
    service: AuthService = Depends(get_auth_service),
) -> dict:
    """Create an account. The client signs in afterwards."""
    identity = await service.register(request)
    return envelope("Account created", identity, status_code=201)


@router.post("/login")
async def login(
    request: LoginRequestDTO,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> dict:
    """
    Credential login.

    On success the session token is set as a cookie and also returned in the body.
    """
    token, session = await service.login(request.email, request.password)
    set_session_cookie(response, token, session.expires_at)
    return envelope("Signed in", _login_data(token, session))


@router.post("/logout")
async def logout(request: Request, response: Response) -> dict:
    """Destroy the session cookie."""
    response.delete_cookie(
        settings.SESSION_COOKIE_NAME,
        path=settings.COOKIE_PATH,
        domain=settings.COOKIE_DOMAIN,
    )
    log_session_operation("logout")
    return envelope("Signed out")


@router.get("/session")
async def read_session(
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> dict:
    """Current session, or ``data: null`` for visitors."""
    token = session_auth_guard.extract_session_token(request)
    if not token:
        return envelope("No session")

    try:
        session = service.read_session(token)
    except (TokenExpiredError, InvalidTokenError):
        return envelope("No session")

    return envelope(
        "Session",
        SessionDTO(
            user=SessionUserDTO(id=session.id, username=session.username, image=session.image),
            expires=session.expires_at,
        ),
    )


@router.post("/session/refresh")
async def refresh_session(
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> dict:
    """Re-issue the session from the current user record (sliding expiry)."""
    token = session_auth_guard.extract_session_token(request)
    if not token:
        raise AuthenticationError(
            "Session token is required", details={"login_path": settings.LOGIN_PATH}
        )

    new_token, session = await service.refresh(token)
    set_session_cookie(response, new_token, session.expires_at)
    return envelope("Session refreshed", _login_data(new_token, session))
