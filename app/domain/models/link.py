"""
MongoDB models for profile links.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

from bson import ObjectId
from pydantic import BaseModel, Field, field_validator


class LinkType(str, Enum):
    """Supported link types, shown with a platform icon on the profile card."""

    TWITTER = "TWITTER"
    YOUTUBE = "YOUTUBE"
    TIKTOK = "TIKTOK"
    DISCORD = "DISCORD"
    INSTAGRAM = "INSTAGRAM"
    GITHUB = "GITHUB"
    WEBSITE = "WEBSITE"
    OTHER = "OTHER"


_HOST_TYPES = {
    "twitter.com": LinkType.TWITTER,
    "x.com": LinkType.TWITTER,
    "youtube.com": LinkType.YOUTUBE,
    "youtu.be": LinkType.YOUTUBE,
    "tiktok.com": LinkType.TIKTOK,
    "discord.gg": LinkType.DISCORD,
    "discord.com": LinkType.DISCORD,
    "instagram.com": LinkType.INSTAGRAM,
    "github.com": LinkType.GITHUB,
}


def detect_link_type(url: str) -> LinkType:
    """Classify a URL by its host; unknown hosts are plain websites."""
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    for domain, link_type in _HOST_TYPES.items():
        if host == domain or host.endswith("." + domain):
            return link_type
    return LinkType.WEBSITE


class ProfileLinkModel(BaseModel):
    """MongoDB model for a link owned by a user."""

    id: Optional[str] = Field(None, alias="_id", description="MongoDB document ID")
    user_id: str = Field(..., description="Owner user ID")
    url: str = Field(..., description="Link URL")
    type: LinkType = Field(..., description="Link type")
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
