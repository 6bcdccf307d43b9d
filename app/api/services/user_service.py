"""
User Service Layer.
Profile reads and mutations: edit, avatar upload target, links, likes and account deletion.
"""

from typing import Optional

from app.api.dto.user_dto import (
    AddLinkRequestDTO,
    EditProfileRequestDTO,
    LikeResultDTO,
    LinkDTO,
    MeDTO,
    ProfileViewDTO,
    UploadTargetDTO,
)
from app.core.exceptions import (
    AuthorizationError,
    IdentityNotFoundError,
    LinkNotFoundError,
    ValidationError,
)
from app.core.logging import get_logger, log_identity_operation, log_link_operation
from app.domain.models.link import detect_link_type
from app.domain.models.user import IdentityModel, IdentityUpdateModel
from app.domain.repositories.like_repository import like_repository
from app.domain.repositories.link_repository import link_repository
from app.domain.repositories.post_repository import post_repository
from app.domain.repositories.user_repository import user_repository
from app.infrastructure.cache.cache_service import cache_service
from app.infrastructure.storage.storage_service import format_avatar, storage_service

logger = get_logger(__name__)


class UserService:
    """Service class for profile reads and mutations."""

    async def _require_user(self, user_id: str) -> IdentityModel:
        user = await user_repository.get_by_id(user_id)
        if user is None:
            raise IdentityNotFoundError(user_id)
        return user

    async def _links(self, user_id: str) -> list[LinkDTO]:
        links = await link_repository.list_for_user(user_id)
        return [LinkDTO(id=link.id, url=link.url, type=link.type) for link in links]

    async def get_me(self, user_id: str) -> MeDTO:
        """The authenticated user's own record."""
        user = await self._require_user(user_id)
        return MeDTO(
            id=user.id,
            username=user.username,
            email=user.email,
            image=user.image,
            tagline=user.tagline,
            verified=user.verified,
            admin=user.admin,
            links=await self._links(user.id),
        )

    async def _build_profile(
        self, username: str, viewer_id: Optional[str]
    ) -> Optional[dict]:
        user = await user_repository.get_by_username(username)
        if user is None:
            return None

        has_liked = False
        if viewer_id and viewer_id != user.id:
            has_liked = await like_repository.has_liked(viewer_id, user.id)

        view = ProfileViewDTO(
            id=user.id,
            username=user.username,
            image=user.image,
            image_url=format_avatar(user.image, user.id),
            tagline=user.tagline,
            verified=user.verified,
            admin=user.admin,
            links=await self._links(user.id),
            image_count=await post_repository.count_for_user(user.id),
            like_count=await like_repository.count(user.id),
            auth_user_has_liked=has_liked,
        )
        return view.model_dump(by_alias=True, mode="json")

    async def get_profile(self, username: str, viewer_id: Optional[str]) -> ProfileViewDTO:
        """
        Public profile by username, as seen by the viewer.

        Raises:
            IdentityNotFoundError: No user has this username
        """
        data = await cache_service.get_or_set_profile(
            username, viewer_id, lambda: self._build_profile(username, viewer_id)
        )
        if data is None:
            raise IdentityNotFoundError(username)
        return ProfileViewDTO(**data)

    async def edit_profile(self, user_id: str, request: EditProfileRequestDTO) -> MeDTO:
        """
        Apply the non-blank profile fields.

        Raises:
            ValidationError: Nothing to change
            UsernameAlreadyTakenError: New username is in use
        """
        if request.is_empty():
            raise ValidationError("Nothing to update")

        user = await self._require_user(user_id)
        update = IdentityUpdateModel(
            **request.model_dump(exclude_none=True)
        )
        updated = await user_repository.update(user_id, update)
        if updated is None:
            raise IdentityNotFoundError(user_id)

        await cache_service.invalidate_profile(user.username, updated.username)
        log_identity_operation(
            "edit_profile",
            identity_id=user_id,
            username=updated.username,
            fields=sorted(update.model_fields_set),
        )
        return await self.get_me(user_id)

    async def set_image(self, user_id: str) -> UploadTargetDTO:
        """
        Point the user's avatar at their storage key and hand out an upload URL.

        The client PUTs the bytes to the returned URL.
        """
        user = await self._require_user(user_id)
        key = storage_service.avatar_key(user.id)
        url = storage_service.create_upload_url(key, user_id=user.id)

        await user_repository.update(user.id, IdentityUpdateModel(image=key))
        await cache_service.invalidate_profile(user.username)
        log_identity_operation("set_image", identity_id=user.id, username=user.username)
        return UploadTargetDTO(url=url, key=key)

    async def delete_image(self, user_id: str) -> None:
        """Remove the avatar from storage and from the profile."""
        user = await self._require_user(user_id)
        if user.image:
            await storage_service.delete_object(user.image, user_id=user.id)

        await user_repository.update(user.id, IdentityUpdateModel(image=None))
        await cache_service.invalidate_profile(user.username)
        log_identity_operation("delete_image", identity_id=user.id, username=user.username)

    async def delete_account(self, user_id: str) -> None:
        """Delete a user together with their posts, images, links and likes."""
        user = await self._require_user(user_id)

        posts = await post_repository.delete_for_user(user.id)
        for post in posts:
            await storage_service.delete_object(post.image, user_id=user.id)
        if user.image:
            await storage_service.delete_object(user.image, user_id=user.id)

        # Profiles this user liked lose a like
        liked_usernames = []
        for target_id in await like_repository.targets_liked_by(user.id):
            target = await user_repository.get_by_id(target_id)
            if target is not None:
                liked_usernames.append(target.username)

        await link_repository.delete_for_user(user.id)
        await like_repository.delete_for_user(user.id)
        await user_repository.delete(user.id)
        await cache_service.invalidate_profile(user.username, *liked_usernames)
        log_identity_operation(
            "delete_account", identity_id=user.id, username=user.username, posts=len(posts)
        )

    async def add_link(self, user_id: str, request: AddLinkRequestDTO) -> LinkDTO:
        """Store a link; its type comes from the URL host. Duplicates are kept."""
        user = await self._require_user(user_id)
        url = request.url
        link_type = detect_link_type(url)

        link = await link_repository.create(user.id, url, link_type)
        await cache_service.invalidate_profile(user.username)
        log_link_operation("add", user_id=user.id, link_type=link_type.value, link_id=link.id)
        return LinkDTO(id=link.id, url=link.url, type=link.type)

    async def delete_link(self, user_id: str, link_id: str) -> None:
        """Delete one of the user's links."""
        user = await self._require_user(user_id)
        if not await link_repository.delete(user.id, link_id):
            raise LinkNotFoundError(link_id)

        await cache_service.invalidate_profile(user.username)
        log_link_operation("delete", user_id=user.id, link_id=link_id)

    async def like_profile(self, user_id: str, target_id: str) -> LikeResultDTO:
        """
        Toggle the caller's like on another profile.

        Raises:
            AuthorizationError: Users cannot like their own profile
            IdentityNotFoundError: Target does not exist
        """
        if user_id == target_id:
            raise AuthorizationError("You cannot like your own profile")

        target = await self._require_user(target_id)
        liked = await like_repository.toggle(user_id, target.id)
        await cache_service.invalidate_profile(target.username)

        return LikeResultDTO(liked=liked, like_count=await like_repository.count(target.id))


# Global service instance
user_service = UserService()
