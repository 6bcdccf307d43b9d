"""
Post Router.
Post listings, owner deletion and reports.
"""

from fastapi import APIRouter, Depends, Query

from app.api.deps.auth_guard import AuthenticatedUser, get_current_user
from app.api.dto.common_dto import envelope
from app.api.dto.post_dto import ReportRequestDTO
from app.api.dto.user_dto import TargetIdRequestDTO
from app.api.services.post_service import post_service

router = APIRouter()


@router.get("/latest")
async def get_latest_posts(
    skip: int = Query(0, ge=0, description="Posts to skip"),
    limit: int = Query(20, ge=1, le=100, description="Posts to return"),
) -> dict:
    """Newest posts across all users."""
    posts = await post_service.get_latest_posts(skip=skip, limit=limit)
    return envelope("Posts retrieved", posts)


@router.get("/user/{username}")
async def get_posts_all_types(username: str) -> dict:
    """Every post of one user."""
    posts = await post_service.get_posts_for_user(username)
    return envelope("Posts retrieved", posts)


@router.post("/delete")
async def delete_post(
    request: TargetIdRequestDTO,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
    """Delete one of the signed-in user's posts."""
    await post_service.delete_post(current_user.user_id, request.id)
    return envelope("Post deleted")


@router.post("/report", status_code=201)
async def report(
    request: ReportRequestDTO,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> dict:
    """Report a user or a post."""
    report_id = await post_service.report(current_user.user_id, request)
    return envelope("Report submitted", {"id": report_id}, status_code=201)
