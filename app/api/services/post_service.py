"""
Post Service Layer.
Post listings, owner and admin deletion, and moderation reports.
"""

from typing import Dict, List, Optional

from app.api.dto.post_dto import PostDTO, ReportRequestDTO
from app.core.exceptions import AuthorizationError, IdentityNotFoundError, PostNotFoundError
from app.core.logging import get_logger
from app.domain.models.post import PostModel, ReportModel
from app.domain.repositories.like_repository import report_repository
from app.domain.repositories.post_repository import post_repository
from app.domain.repositories.user_repository import user_repository
from app.infrastructure.cache.cache_service import cache_service
from app.infrastructure.storage.storage_service import storage_service

logger = get_logger(__name__)


class PostService:
    """Service class for posts and reports."""

    async def _to_dtos(
        self, posts: List[PostModel], usernames: Optional[Dict[str, str]] = None
    ) -> List[PostDTO]:
        usernames = dict(usernames or {})
        result = []
        for post in posts:
            if post.user_id not in usernames:
                author = await user_repository.get_by_id(post.user_id)
                usernames[post.user_id] = author.username if author else None
            result.append(
                PostDTO(
                    id=post.id,
                    user_id=post.user_id,
                    username=usernames[post.user_id],
                    image=post.image,
                    image_url=storage_service.public_url(post.image),
                    type=post.type,
                    created_at=post.created_at,
                )
            )
        return result

    async def get_latest_posts(self, skip: int = 0, limit: int = 20) -> List[PostDTO]:
        """Newest posts across all users."""
        posts = await post_repository.list_latest(skip=skip, limit=limit)
        return await self._to_dtos(posts)

    async def get_posts_for_user(self, username: str) -> List[PostDTO]:
        """All posts of a user, newest first."""
        user = await user_repository.get_by_username(username)
        if user is None:
            raise IdentityNotFoundError(username)
        posts = await post_repository.list_for_user(user.id)
        return await self._to_dtos(posts, {user.id: user.username})

    async def _remove(self, post: PostModel, actor_id: str) -> None:
        await storage_service.delete_object(post.image, user_id=actor_id)
        await post_repository.delete(post.id)

        author = await user_repository.get_by_id(post.user_id)
        if author:
            await cache_service.invalidate_profile(author.username)
        logger.info(f"Post {post.id} deleted by {actor_id}")

    async def delete_post(self, user_id: str, post_id: str) -> None:
        """
        Delete one of the caller's own posts and its image.

        Raises:
            PostNotFoundError: No such post
            AuthorizationError: The post belongs to someone else
        """
        post = await post_repository.get(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        if post.user_id != user_id:
            raise AuthorizationError("You can only delete your own posts")
        await self._remove(post, user_id)

    async def admin_delete_post(self, admin_id: str, post_id: str) -> None:
        """Delete any post (admin only, checked by the router)."""
        post = await post_repository.get(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        await self._remove(post, admin_id)

    async def report(self, user_id: str, request: ReportRequestDTO) -> str:
        """File a moderation report on a user or a post."""
        report_id = await report_repository.create(
            ReportModel(
                reporter_id=user_id,
                type=request.type,
                target_id=request.id,
                reason=request.reason,
            )
        )
        logger.info(
            "Report filed",
            report_id=report_id,
            reporter_id=user_id,
            type=request.type.value,
            target_id=request.id,
        )
        return report_id


# Global service instance
post_service = PostService()
