"""
User Router.
Profile read and mutation endpoints consumed by the settings page and profile card.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from app.api.deps.auth_guard import AuthenticatedUser, get_current_user, get_optional_user
from app.api.dto.common_dto import envelope
from app.api.dto.user_dto import AddLinkRequestDTO, EditProfileRequestDTO, TargetIdRequestDTO
from app.api.services.user_service import user_service
from app.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/me")
async def get_me(current_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
    """The signed-in user's own record."""
    return envelope("Profile retrieved", await user_service.get_me(current_user.user_id))


@router.get("/profile/{username}")
async def get_profile(
    username: str,
    current_user: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> dict:
    """Public profile; like state is relative to the viewer when signed in."""
    viewer_id = current_user.user_id if current_user else None
    profile = await user_service.get_profile(username, viewer_id)
    return envelope("Profile retrieved", profile)


@router.post("/edit")
async def edit_profile(
    request: EditProfileRequestDTO,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
    """Change username and/or tagline."""
    me = await user_service.edit_profile(current_user.user_id, request)
    return envelope("Profile updated", me)


@router.post("/image")
async def set_image(current_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
    """Return a presigned URL the client uploads the avatar bytes to."""
    target = await user_service.set_image(current_user.user_id)
    return envelope("Upload URL created", target)


@router.delete("/image")
async def delete_image(current_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
    """Remove the avatar."""
    await user_service.delete_image(current_user.user_id)
    return envelope("Image deleted")


@router.post("/delete")
async def delete_profile(current_user: AuthenticatedUser = Depends(get_current_user)) -> dict:
    """Delete the signed-in user's account."""
    await user_service.delete_account(current_user.user_id)
    return envelope("Account deleted")


@router.post("/links", status_code=201)
async def add_link(
    request: AddLinkRequestDTO,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
    """Add a link to the profile."""
    link = await user_service.add_link(current_user.user_id, request)
    return envelope("Link added", link, status_code=201)


@router.delete("/links/{link_id}")
async def delete_link(
    link_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
    """Remove a link from the profile."""
    await user_service.delete_link(current_user.user_id, link_id)
    return envelope("Link deleted")


@router.post("/like")
async def like_profile(
    request: TargetIdRequestDTO,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
    """Toggle a like on another user's profile."""
    result = await user_service.like_profile(current_user.user_id, request.id)
    return envelope("Liked" if result.liked else "Unliked", result)
