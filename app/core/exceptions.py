"""
Custom exceptions for the Profile Share backend.
Provides structured error handling for authentication, profiles, links and posts.
"""

from typing import Any, Dict, Optional
from fastapi import status


class ProfileShareException(Exception):
    """Base exception for the Profile Share application."""

    def __init__(
        self,
        message: str,
        error_code: str = "PROFILE_SHARE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# Authentication & Authorization
class AuthenticationError(ProfileShareException):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "AUTH_ERROR", details)


class AuthorizationError(ProfileShareException):
    """Raised when authorization fails."""

    def __init__(self, message: str = "Access denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "AUTHZ_ERROR", details)


class SessionExpiredError(ProfileShareException):
    """Raised when user session has expired."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Session has expired", "SESSION_EXPIRED", details)


# Identity Management
class IdentityNotFoundError(ProfileShareException):
    """Raised when a user identity is not found."""

    def __init__(self, identity_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Identity not found: {identity_id}"
        super().__init__(message, "IDENTITY_NOT_FOUND", details)


class UsernameAlreadyTakenError(ProfileShareException):
    """Raised when trying to register or rename to a username that's already taken."""

    def __init__(self, username: str, details: Optional[Dict[str, Any]] = None):
        message = f"Username already taken: {username}"
        super().__init__(message, "USERNAME_TAKEN", details)


class EmailAlreadyRegisteredError(ProfileShareException):
    """Raised when trying to register an email that already has an account."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Email already registered", "EMAIL_TAKEN", details)


# Links & Posts
class LinkNotFoundError(ProfileShareException):
    """Raised when a profile link is not found."""

    def __init__(self, link_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Link not found: {link_id}"
        super().__init__(message, "LINK_NOT_FOUND", details)


class PostNotFoundError(ProfileShareException):
    """Raised when a post is not found."""

    def __init__(self, post_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Post not found: {post_id}"
        super().__init__(message, "POST_NOT_FOUND", details)


# Object storage
class StorageError(ProfileShareException):
    """Raised when object storage operations fail."""

    def __init__(self, message: str = "Storage operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "STORAGE_ERROR", details)


# Database Operations
class DatabaseError(ProfileShareException):
    """Raised when database operations fail."""

    def __init__(self, message: str = "Database operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "DATABASE_ERROR", details)


# Validation
class ValidationError(ProfileShareException):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


# Token Management
class TokenExpiredError(ProfileShareException):
    """Raised when a session token has expired."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Token has expired", "TOKEN_EXPIRED", details)


class InvalidTokenError(ProfileShareException):
    """Raised when a session token is invalid."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Invalid token", "INVALID_TOKEN", details)


# Client-side mutation failures
class NetworkError(ProfileShareException):
    """Raised by the client when a request never produced a response."""

    def __init__(self, message: str = "Network request failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "NETWORK_ERROR", details)


class ServerError(ProfileShareException):
    """Raised by the client when the server answered with an error envelope."""

    def __init__(
        self,
        message: str = "Server request failed",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "SERVER_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)
        self.status_code = status_code


def get_exception_status_code(exc: ProfileShareException) -> int:
    """
    Get the appropriate HTTP status code for a ProfileShareException.

    Args:
        exc: ProfileShareException instance

    Returns:
        int: HTTP status code
    """
    status_mapping = {
        # Authentication & Authorization
        "AUTH_ERROR": status.HTTP_401_UNAUTHORIZED,
        "AUTHZ_ERROR": status.HTTP_403_FORBIDDEN,
        "SESSION_EXPIRED": status.HTTP_401_UNAUTHORIZED,

        # Identity Management
        "IDENTITY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "USERNAME_TAKEN": status.HTTP_409_CONFLICT,
        "EMAIL_TAKEN": status.HTTP_409_CONFLICT,

        # Links & Posts
        "LINK_NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "POST_NOT_FOUND": status.HTTP_404_NOT_FOUND,

        # Object storage
        "STORAGE_ERROR": status.HTTP_502_BAD_GATEWAY,

        # Database Operations
        "DATABASE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,

        # Validation
        "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,

        # Token Management
        "TOKEN_EXPIRED": status.HTTP_401_UNAUTHORIZED,
        "INVALID_TOKEN": status.HTTP_401_UNAUTHORIZED,
    }

    return status_mapping.get(exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
