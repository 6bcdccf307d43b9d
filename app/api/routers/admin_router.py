"""
Admin Router.
Moderation endpoints; every route requires the admin flag.
"""

from fastapi import APIRouter, Depends

from app.api.deps.auth_guard import AuthenticatedUser, get_admin_user
from app.api.dto.common_dto import envelope
from app.api.dto.user_dto import TargetIdRequestDTO
from app.api.services.post_service import post_service
from app.api.services.user_service import user_service
from app.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/user/delete")
async def delete_user(
    request: TargetIdRequestDTO,
    current_user: AuthenticatedUser = Depends(get_admin_user),
) -> dict:
    """
    Delete any user account. (Admin Only)

    Removes the user's posts, images, links and likes.
    """
    logger.info(f"Admin {current_user.user_id} deleting user {request.id}")
    await user_service.delete_account(request.id)
    return envelope("User deleted successfully")


@router.post("/post/delete")
async def delete_post(
    request: TargetIdRequestDTO,
    current_user: AuthenticatedUser = Depends(get_admin_user),
) -> dict:
    """Delete any post. (Admin Only)"""
    await post_service.admin_delete_post(current_user.user_id, request.id)
    return envelope("Post deleted successfully")
