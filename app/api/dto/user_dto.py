"""
DTOs (Data Transfer Objects) for user profile endpoints.
"""

from typing import List, Optional

from pydantic import AnyHttpUrl, BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.api.dto.auth_dto import validate_username
from app.domain.models.link import LinkType

TAGLINE_MAX_LENGTH = 160

_http_url = TypeAdapter(AnyHttpUrl)


# Request DTOs
class EditProfileRequestDTO(BaseModel):
    """Profile fields to change. Blank fields are left untouched."""

    username: Optional[str] = Field(None, description="New username")
    tagline: Optional[str] = Field(None, description="New tagline")

    class Config:
        extra = "forbid"

    @field_validator("username", "tagline", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("username")
    @classmethod
    def check_username(cls, v):
        if v is None:
            return v
        return validate_username(v)

    @field_validator("tagline")
    @classmethod
    def check_tagline(cls, v):
        if v is not None and len(v) > TAGLINE_MAX_LENGTH:
            raise ValueError(f"Tagline must be at most {TAGLINE_MAX_LENGTH} characters")
        return v

    def is_empty(self) -> bool:
        return self.username is None and self.tagline is None


class AddLinkRequestDTO(BaseModel):
    """Request DTO for adding a profile link."""

    url: str = Field(..., description="Link URL (http or https)")

    class Config:
        extra = "forbid"

    @field_validator("url")
    @classmethod
    def check_url(cls, v):
        """Accept only http(s) URLs; the URL is stored as entered."""
        v = v.strip()
        try:
            _http_url.validate_python(v)
        except PydanticValidationError:
            raise ValueError("URL must be a valid http or https address")
        return v


class TargetIdRequestDTO(BaseModel):
    """Request DTO for operations addressed by a single ID."""

    id: str = Field(..., min_length=1, description="Target ID")

    class Config:
        extra = "forbid"


# Response DTOs
class LinkDTO(BaseModel):
    """DTO for a profile link."""

    id: str = Field(..., description="Link ID")
    url: str = Field(..., description="Link URL")
    type: LinkType = Field(..., description="Link type")


class MeDTO(BaseModel):
    """The authenticated user's own record, without the password hash."""

    id: str
    username: str
    email: str
    image: Optional[str] = None
    tagline: Optional[str] = None
    verified: bool = False
    admin: bool = False
    links: List[LinkDTO] = Field(default_factory=list)


class ProfileViewDTO(BaseModel):
    """Public profile as shown on the profile card."""

    id: str
    username: str
    image: Optional[str] = None
    image_url: str = Field(..., alias="imageUrl")
    tagline: Optional[str] = None
    verified: bool = False
    admin: bool = False
    links: List[LinkDTO] = Field(default_factory=list)
    image_count: int = Field(0, alias="imageCount")
    like_count: int = Field(0, alias="likeCount")
    auth_user_has_liked: bool = Field(False, alias="authUserHasLiked")

    class Config:
        populate_by_name = True


class LikeResultDTO(BaseModel):
    """Outcome of a like toggle."""

    liked: bool
    like_count: int = Field(..., alias="likeCount")

    class Config:
        populate_by_name = True


class UploadTargetDTO(BaseModel):
    """Presigned upload target for an avatar."""

    url: str = Field(..., description="Presigned PUT URL")
    key: str = Field(..., description="Object key the upload lands at")
