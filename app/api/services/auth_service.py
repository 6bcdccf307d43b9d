"""
Authentication Service Layer.
Credential check against stored identities, registration, and session issue/refresh.
"""

from typing import Callable, Optional, Tuple

from app.api.dto.auth_dto import RegisterRequestDTO
from app.core.exceptions import AuthenticationError, SessionExpiredError
from app.core.logging import get_logger, log_identity_operation, log_session_operation
from app.core.security import (
    SessionTokenManager,
    hash_password,
    session_token_manager,
    verify_password,
)
from app.domain.models.user import IdentityCreateModel, PublicIdentity, SessionUser
from app.domain.repositories.user_repository import UserRepository, user_repository

logger = get_logger(__name__)


class CredentialAuthenticator:
    """
    Credential provider: checks an email/password pair against stored users.

    The password hash never leaves this class; callers only ever receive a
    ``PublicIdentity``.
    """

    def __init__(
        self,
        users: Optional[UserRepository] = None,
        verify: Callable[[str, str], bool] = verify_password,
    ):
        self.users = users or user_repository
        self.verify = verify

    async def authorize(
        self, email: Optional[str], password: Optional[str]
    ) -> PublicIdentity:
        """
        Validate credentials.

        Args:
            email: Login email (exact match)
            password: Plaintext password, possibly absent

        Returns:
            PublicIdentity: {id, username, image}

        Raises:
            AuthenticationError: "no such user" or "credential mismatch"
        """
        user = await self.users.get_by_email(email) if email else None

        if user is None:
            log_session_operation("authorize", status="failed", reason="no_such_user")
            raise AuthenticationError("no such user")

        password_matches = bool(
            user.password and password and self.verify(password, user.password)
        )

        if not password_matches:
            log_session_operation(
                "authorize", user_id=user.id, status="failed", reason="credential_mismatch"
            )
            raise AuthenticationError("credential mismatch")

        return user.to_public()


class AuthService:
    """Service class for registration and session handling."""

    def __init__(
        self,
        users: Optional[UserRepository] = None,
        authenticator: Optional[CredentialAuthenticator] = None,
        tokens: Optional[SessionTokenManager] = None,
    ):
        self.users = users or user_repository
        self.authenticator = authenticator or CredentialAuthenticator(self.users)
        self.tokens = tokens or session_token_manager

    async def register(self, request: RegisterRequestDTO) -> PublicIdentity:
        """
        Create an account with a bcrypt password hash.

        Raises:
            UsernameAlreadyTakenError: Username is in use
            EmailAlreadyRegisteredError: Email is in use
        """
        created = await self.users.create(
            IdentityCreateModel(
                email=request.email,
                username=request.username,
                password=hash_password(request.password),
            )
        )
        log_identity_operation("register", identity_id=created.id, username=created.username)
        return created.to_public()

    async def login(
        self, email: Optional[str], password: Optional[str]
    ) -> Tuple[str, SessionUser]:
        """Authenticate and issue a session token."""
        identity = await self.authenticator.authorize(email, password)
        token = self.tokens.issue(identity)
        log_session_operation("issue", user_id=identity.id)
        return token, self.tokens.decode(token)

    def read_session(self, token: str) -> SessionUser:
        """Decode a session token into its identity."""
        return self.tokens.decode(token)

    async def refresh(self, token: str) -> Tuple[str, SessionUser]:
        """
        Re-issue a session token from the authoritative identity.

        The new token gets a fresh expiry and the current username and image.

        Raises:
            SessionExpiredError: The user behind the token no longer exists
        """
        session = self.tokens.decode(token)
        user = await self.users.get_by_id(session.id)
        if user is None:
            log_session_operation("refresh", user_id=session.id, status="failed")
            raise SessionExpiredError(details={"reason": "user no longer exists"})

        new_token = self.tokens.issue(user.to_public())
        log_session_operation("refresh", user_id=user.id)
        return new_token, self.tokens.decode(new_token)


# Global service instance
auth_service = AuthService()
