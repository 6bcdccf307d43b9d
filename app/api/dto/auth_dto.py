"""
DTOs (Data Transfer Objects) for authentication endpoints.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.config import settings

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,30}$")


def validate_username(value: str) -> str:
    """Usernames are 3-30 characters of letters, digits, ``_``, ``.`` or ``-``."""
    if not USERNAME_PATTERN.match(value):
        raise ValueError(
            "Username must be 3-30 characters: letters, digits, '_', '.' or '-'"
        )
    return value


# Request DTOs
class RegisterRequestDTO(BaseModel):
    """Request DTO for creating an account."""

    email: EmailStr = Field(..., description="Login email")
    username: str = Field(..., description="Public username")
    password: str = Field(..., description="Plaintext password")

    class Config:
        extra = "forbid"

    @field_validator("username")
    @classmethod
    def check_username(cls, v):
        return validate_username(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if len(v) < settings.PASSWORD_MIN_LENGTH:
            raise ValueError(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
            )
        return v


class LoginRequestDTO(BaseModel):
    """Credentials for the credential provider. Both fields may be absent."""

    email: Optional[str] = Field(None, description="Login email")
    password: Optional[str] = Field(None, description="Plaintext password")

    class Config:
        extra = "forbid"


# Response DTOs
class SessionUserDTO(BaseModel):
    """Identity exposed to every page through the session."""

    id: str = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    image: Optional[str] = Field(None, description="Avatar object key")


class SessionDTO(BaseModel):
    """Current session as read by the client."""

    user: SessionUserDTO = Field(..., description="Session identity")
    expires: Optional[datetime] = Field(None, description="Token expiry")


class LoginDataDTO(BaseModel):
    """Payload returned by login and session refresh."""

    user: SessionUserDTO = Field(..., description="Session identity")
    token: str = Field(..., description="Signed session token")
    expires: Optional[datetime] = Field(None, description="Token expiry")
