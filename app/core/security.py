"""
Security utilities for the Profile Share backend.
Handles password hashing and the signed session tokens that carry the current identity.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import InvalidTokenError, TokenExpiredError
from app.core.logging import get_logger
from app.domain.models.user import PublicIdentity, SessionUser

logger = get_logger(__name__)

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS
)


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Compare a plaintext password with a stored hash.

    The comparison itself is constant-time inside passlib. A malformed stored
    hash counts as a mismatch.
    """
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


class SessionTokenManager:
    """Issues and reads the signed session token (JWT, sliding expiry)."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        max_age: Optional[timedelta] = None,
    ):
        self.secret_key = secret_key or settings.JWT_SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.max_age = max_age or timedelta(days=settings.SESSION_MAX_AGE_DAYS)

    def issue(self, identity: PublicIdentity, now: Optional[datetime] = None) -> str:
        """
        Create a session token for an identity.

        Args:
            identity: Public identity projection (never the stored record)
            now: Issue time, defaults to the current UTC time

        Returns:
            str: Encoded JWT
        """
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": identity.id,
            "username": identity.username,
            "image": identity.image,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.max_age).timestamp()),
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> SessionUser:
        """
        Read a session token.

        Raises:
            TokenExpiredError: If the token is past its expiry
            InvalidTokenError: If the signature or claims are invalid
        """
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError:
            raise InvalidTokenError()

        if not claims.get("sub") or not claims.get("username"):
            raise InvalidTokenError(details={"reason": "missing identity claims"})

        return SessionUser(
            id=claims["sub"],
            username=claims["username"],
            image=claims.get("image"),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )


# Global instances
session_token_manager = SessionTokenManager()
