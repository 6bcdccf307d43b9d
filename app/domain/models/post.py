"""
MongoDB models for posts, profile likes and reports.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, Field, field_validator


class PostType(str, Enum):
    """Kind of shot a post shows."""

    OUTFIT = "OUTFIT"
    SHOES = "SHOES"
    ACCESSORY = "ACCESSORY"
    HAT = "HAT"


class ReportType(str, Enum):
    """What a report points at."""

    USER = "USER"
    POST = "POST"


class PostModel(BaseModel):
    """MongoDB model for a post."""

    id: Optional[str] = Field(None, alias="_id", description="MongoDB document ID")
    user_id: str = Field(..., description="Author user ID")
    image: str = Field(..., description="Image object key")
    type: PostType = Field(default=PostType.OUTFIT, description="Post type")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp",
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


class ProfileLikeModel(BaseModel):
    """A like left by one user on another user's profile."""

    user_id: str = Field(..., description="User who liked")
    target_id: str = Field(..., description="Liked profile's user ID")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp",
    )


class ReportModel(BaseModel):
    """A moderation report on a user or a post."""

    reporter_id: str = Field(..., description="Reporting user ID")
    type: ReportType = Field(..., description="Report target kind")
    target_id: str = Field(..., description="Reported user or post ID")
    reason: Optional[str] = Field(None, description="Free-form reason")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp",
    )
