"""
User models for the Profile Share backend.
The stored identity carries the password hash; every projection handed out of the
authentication boundary is built without it.
"""

from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, Field, field_validator


class IdentityModel(BaseModel):
    """MongoDB model for a registered user."""

    id: Optional[str] = Field(None, alias="_id", description="MongoDB document ID")
    username: str = Field(..., description="Unique username")
    email: str = Field(..., description="Login email")
    password: Optional[str] = Field(None, description="bcrypt password hash")
    image: Optional[str] = Field(None, description="Avatar object key")
    tagline: Optional[str] = Field(None, description="Profile tagline")
    verified: bool = Field(default=False, description="Verified badge")
    admin: bool = Field(default=False, description="Administrator flag")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last update timestamp",
    )

    @field_validator("id", mode="before")
    @classmethod
    def convert_objectid_to_str(cls, v):
        """Convert MongoDB ObjectId to string."""
        if isinstance(v, ObjectId):
            return str(v)
        return v

    class Config:
        populate_by_name = True

    def to_public(self) -> "PublicIdentity":
        """Project to the fields that may leave the authentication boundary."""
        return PublicIdentity(id=self.id, username=self.username, image=self.image)


class PublicIdentity(BaseModel):
    """Minimal identity projection returned by authentication."""

    id: str = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    image: Optional[str] = Field(None, description="Avatar object key")


class SessionUser(PublicIdentity):
    """Identity embedded in a signed session token."""

    expires_at: Optional[datetime] = Field(None, description="Token expiry")


class IdentityCreateModel(BaseModel):
    """Model for inserting a new user."""

    username: str
    email: str
    password: str = Field(..., description="bcrypt password hash")
    verified: bool = False
    admin: bool = False


class IdentityUpdateModel(BaseModel):
    """Model for updating profile fields."""

    username: Optional[str] = None
    tagline: Optional[str] = None
    image: Optional[str] = None
