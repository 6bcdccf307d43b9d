"""
DTOs (Data Transfer Objects) for post and report endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.domain.models.post import PostType, ReportType

REPORT_REASON_MAX_LENGTH = 500


class ReportRequestDTO(BaseModel):
    """Request DTO for reporting a user or a post."""

    type: ReportType = Field(..., description="USER or POST")
    id: str = Field(..., min_length=1, description="Reported user or post ID")
    reason: Optional[str] = Field(
        None, max_length=REPORT_REASON_MAX_LENGTH, description="Optional reason"
    )

    class Config:
        extra = "forbid"


class PostDTO(BaseModel):
    """DTO for a post as listed on profile and explore pages."""

    id: str
    user_id: str = Field(..., alias="userId")
    username: Optional[str] = None
    image: str
    image_url: str = Field(..., alias="imageUrl")
    type: PostType
    created_at: datetime = Field(..., alias="createdAt")

    class Config:
        populate_by_name = True
