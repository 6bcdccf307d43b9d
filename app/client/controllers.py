"""
Page controllers for the settings page, the profile card and the post modal.

Controllers are cooperative asyncio objects. Each user action runs at most one
request chain at a time, errors are turned into toasts by ``handle_errors``,
and ``dispose()`` (navigating away) cancels whatever chain is still running.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from app.api.dto.user_dto import EditProfileRequestDTO
from app.client.api_client import validate_request
from app.client.context import ClientContext
from app.client.notifications import handle_errors
from app.client.optimistic import OptimisticMutation
from app.client.query_cache import query_key
from app.client.uploads import FileStager, StagedUpload
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.infrastructure.storage.storage_service import format_avatar

logger = get_logger(__name__)


class FormState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


def toggle_like(profile: Dict[str, Any]) -> Dict[str, Any]:
    """Expected profile view after the viewer toggles their like."""
    liked = profile["authUserHasLiked"]
    return {
        **profile,
        "authUserHasLiked": not liked,
        "likeCount": profile["likeCount"] + (-1 if liked else 1),
    }


def without_post(post_id: str) -> Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]:
    def update(posts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [post for post in posts if post.get("id") != post_id]

    return update


class ConfirmModal:
    """Confirmation gate in front of a destructive action."""

    def __init__(self):
        self.is_open = False
        self._action: Optional[Callable[[], Awaitable[Any]]] = None

    def open(self, action: Callable[[], Awaitable[Any]]) -> None:
        self._action = action
        self.is_open = True

    def cancel(self) -> None:
        self._action = None
        self.is_open = False

    async def confirm(self) -> Any:
        """Run the gated action. Does nothing unless the modal is open."""
        if not self.is_open or self._action is None:
            return None
        action = self._action
        self.cancel()
        return await action()


class PageController:
    """Tracks the request chains started by one page so they can be cancelled."""

    def __init__(self, ctx: ClientContext):
        self.ctx = ctx
        self.disposed = False
        self._tasks: Set["asyncio.Task[Any]"] = set()

    async def _spawn(self, chain: Callable[[], Awaitable[Any]]) -> Any:
        """Run ``chain`` as a cancellable task; returns None if disposed meanwhile."""
        if self.disposed:
            return None
        task = asyncio.ensure_future(chain())
        self._tasks.add(task)
        try:
            return await task
        except asyncio.CancelledError:
            if self.disposed and task.cancelled():
                logger.debug(f"{self.__class__.__name__} chain cancelled on dispose")
                return None
            raise
        finally:
            self._tasks.discard(task)

    def dispose(self) -> None:
        """Cancel every in-flight chain. Cancelled chains write no server results."""
        self.disposed = True
        for task in list(self._tasks):
            task.cancel()


class ProfileSettingsController(PageController):
    """Settings page: avatar, username/tagline, links, account deletion."""

    def __init__(self, ctx: ClientContext):
        super().__init__(ctx)
        self.state = FormState.IDLE
        self.stager = FileStager(self._current_avatar())
        self.delete_modal = ConfirmModal()
        self.link_loading = False

    def _current_avatar(self) -> Optional[str]:
        user = self.ctx.session.user
        if not user:
            return None
        return format_avatar(user.get("image"), user.get("id"))

    def _reset(self) -> None:
        self.state = FormState.IDLE

    async def _invalidate_profile(self, *usernames: Optional[str]) -> None:
        await self.ctx.cache.invalidate(query_key("user.getMe"))
        for username in {name for name in usernames if name}:
            await self.ctx.cache.invalidate(query_key("user.getProfile", username=username))

    async def _refresh_session(self, **local: Any) -> bool:
        """
        Re-read the session after a mutation that already landed.

        On failure the error is toasted and ``local`` identity fields are
        written into the held session so it matches what the server stored.
        """
        try:
            await self.ctx.session.update()
        except Exception as e:
            handle_errors(e, "Failed to refresh session!", self.ctx.notifier)
            if local and self.ctx.session.user is not None:
                self.ctx.session.user = {**self.ctx.session.user, **local}
            return False
        return True

    async def submit_profile(
        self,
        username: Optional[str] = None,
        tagline: Optional[str] = None,
        staged_file: Optional[StagedUpload] = None,
    ) -> bool:
        """
        Save the settings form.

        Order: upload the staged avatar, edit the text fields, refresh the
        session, then navigate to the profile. Returns True once navigated.
        A call made while a previous submission is running is ignored.
        """
        if self.state is FormState.SUBMITTING:
            logger.debug("Ignoring profile submission while another is in flight")
            return False

        self.state = FormState.SUBMITTING
        try:
            return bool(
                await self._spawn(
                    lambda: self._submit_chain(username, tagline, staged_file or self.stager.file)
                )
            )
        finally:
            self._reset()

    async def _submit_chain(
        self,
        username: Optional[str],
        tagline: Optional[str],
        staged_file: Optional[StagedUpload],
    ) -> bool:
        username = (username or "").strip() or None
        tagline = (tagline or "").strip() or None
        has_fields = username is not None or tagline is not None

        if staged_file is None and not has_fields:
            return False

        if has_fields:
            try:
                validate_request(EditProfileRequestDTO, {"username": username, "tagline": tagline})
            except ValidationError as e:
                handle_errors(e, "Failed to edit profile!", self.ctx.notifier)
                return False

        previous_username = (self.ctx.session.user or {}).get("username")

        if staged_file is not None:
            try:
                target = await self.ctx.api.set_image()
                await self.ctx.api.upload_to_storage(
                    target.url, staged_file.content, staged_file.content_type
                )
            except Exception as e:
                handle_errors(e, "Failed to set image!", self.ctx.notifier)
                return False
            self.stager.clear()

        destination = previous_username
        if has_fields:
            try:
                me = await self.ctx.api.edit_profile(username=username, tagline=tagline)
            except Exception as e:
                handle_errors(e, "Failed to edit profile!", self.ctx.notifier)
                return False
            destination = me["username"]

        local = {"username": destination} if has_fields else {}
        refreshed = await self._refresh_session(**local)
        await self._invalidate_profile(previous_username, destination)
        if not refreshed:
            return False

        self.ctx.navigator.push(f"/{destination}")
        return True

    async def add_link(self, url: str) -> bool:
        """Add a profile link and refresh the views that list it."""
        if self.link_loading:
            return False
        self.link_loading = True

        async def chain() -> bool:
            try:
                await self.ctx.api.add_link(url)
            except Exception as e:
                handle_errors(e, "Failed to add link!", self.ctx.notifier)
                return False
            self.ctx.notifier.success("Link added!")
            await self._refresh_session()
            await self._invalidate_profile(self.ctx.session.user["username"])
            return True

        try:
            return bool(await self._spawn(chain))
        finally:
            self.link_loading = False

    async def delete_link(self, link_id: str) -> bool:
        async def chain() -> bool:
            try:
                await self.ctx.api.delete_link(link_id)
            except Exception as e:
                handle_errors(e, "Failed to delete link!", self.ctx.notifier)
                return False
            self.ctx.notifier.success("Link removed!")
            await self._invalidate_profile(self.ctx.session.user["username"])
            return True

        return bool(await self._spawn(chain))

    def stage_file(self, content: bytes, content_type: Optional[str] = None, filename: Optional[str] = None):
        """Stage a selected avatar; invalid files are reported as a toast."""
        try:
            return self.stager.stage(content, content_type, filename)
        except ValidationError as e:
            handle_errors(e, e.message, self.ctx.notifier)
            return None

    def cancel_crop(self) -> None:
        self.stager.clear(self._current_avatar())

    async def delete_image(self) -> bool:
        async def chain() -> bool:
            try:
                await self.ctx.api.delete_image()
            except Exception as e:
                handle_errors(e, "Failed to delete image!", self.ctx.notifier, fn=self._reset)
                return False
            self.ctx.notifier.success("Image deleted!")
            await self._refresh_session(image=None)
            self.stager.clear(self._current_avatar())
            await self._invalidate_profile(self.ctx.session.user["username"])
            return True

        return bool(await self._spawn(chain))

    def request_delete_account(self) -> None:
        """Open the confirmation modal; nothing is deleted until ``confirm_delete``."""
        self.delete_modal.open(lambda: self._spawn(self._delete_account_chain))

    async def confirm_delete(self) -> bool:
        return bool(await self.delete_modal.confirm())

    async def _delete_account_chain(self) -> bool:
        try:
            await self.ctx.api.delete_profile()
        except Exception as e:
            handle_errors(e, "Failed to delete account!", self.ctx.notifier, fn=self._reset)
            return False
        self.ctx.notifier.success("Account deleted!")
        try:
            await self.ctx.session.sign_out()
        except Exception as e:
            handle_errors(e, "Failed to sign out!", self.ctx.notifier)
        self.ctx.navigator.push("/")
        return True


class ProfileCardController(PageController):
    """Profile card: like toggle, share, report and admin deletion."""

    def __init__(self, ctx: ClientContext, username: str):
        super().__init__(ctx)
        self.username = username
        self.key = query_key("user.getProfile", username=username)
        self.liking = False
        self.delete_modal = ConfirmModal()

    @property
    def profile(self) -> Optional[Dict[str, Any]]:
        return self.ctx.cache.get_data(self.key)

    @property
    def is_current_user(self) -> bool:
        user = self.ctx.session.user
        return bool(user) and user.get("username") == self.username

    async def load(self) -> Optional[Dict[str, Any]]:
        try:
            return await self._spawn(lambda: self.ctx.get_profile(self.username))
        except Exception as e:
            handle_errors(e, "Could not load profile.", self.ctx.notifier)
            return None

    async def like_profile(self) -> Optional[bool]:
        """
        Toggle the viewer's like optimistically.

        Visitors without a session are sent to the login page instead.
        Returns the confirmed liked state, or None if nothing was confirmed.
        """
        if not self.ctx.session.is_authenticated:
            self.ctx.navigator.push(settings.LOGIN_PATH)
            return None
        if self.liking or self.is_current_user:
            return None

        profile = self.profile
        if not profile or not profile.get("id"):
            return None

        target_id = profile["id"]
        mutation = OptimisticMutation(
            self.ctx.cache,
            mutate=lambda: self.ctx.api.like_profile(target_id),
            updates={self.key: toggle_like},
        )

        async def chain() -> Optional[bool]:
            try:
                result = await mutation.run()
            except Exception as e:
                handle_errors(e, "Could not like!", self.ctx.notifier)
                return None
            return result["liked"]

        self.liking = True
        try:
            return await self._spawn(chain)
        finally:
            self.liking = False

    def request_delete_user(self) -> None:
        """Admin only: confirm before deleting the profile's user."""
        profile = self.profile
        if not profile or not profile.get("id"):
            self.ctx.notifier.error("An error occurred while deleting this user.")
            return
        user_id = profile["id"]
        self.delete_modal.open(lambda: self._spawn(lambda: self._delete_user_chain(user_id)))

    async def confirm_delete(self) -> bool:
        return bool(await self.delete_modal.confirm())

    async def _delete_user_chain(self, user_id: str) -> bool:
        try:
            await self.ctx.api.admin_delete_user(user_id)
        except Exception as e:
            handle_errors(e, "An error occurred while deleting this user.", self.ctx.notifier)
            return False
        self.ctx.notifier.success("User deleted successfully!")
        self.ctx.cache.remove(self.key)
        self.ctx.navigator.push("/explore")
        return True

    async def report(self, reason: Optional[str] = None) -> bool:
        profile = self.profile
        if not profile:
            return False

        async def chain() -> bool:
            try:
                await self.ctx.api.report("USER", profile["id"], reason)
            except Exception as e:
                handle_errors(e, "Failed to submit report.", self.ctx.notifier)
                return False
            self.ctx.notifier.success("Report submitted!")
            return True

        return bool(await self._spawn(chain))

    def share(self) -> str:
        url = self.ctx.navigator.url(f"/{self.username}")
        self.ctx.clipboard.write_text(url)
        self.ctx.notifier.success("Copied profile link to clipboard!")
        return url


class PostModalController(PageController):
    """Post detail modal: owner/admin deletion, report and share."""

    def __init__(self, ctx: ClientContext, post: Dict[str, Any], owner: Dict[str, Any]):
        super().__init__(ctx)
        self.post = post
        self.owner = owner
        self.is_open = True
        self.delete_modal = ConfirmModal()
        self.admin_delete_modal = ConfirmModal()

    @property
    def viewer_is_owner(self) -> bool:
        user = self.ctx.session.user
        return bool(user) and user.get("id") == self.owner.get("id")

    def close(self) -> None:
        self.is_open = False
        self.ctx.navigator.push(self.ctx.navigator.current.split("?")[0] or "/")

    def _removal(self, mutate: Callable[[], Awaitable[Any]]) -> OptimisticMutation:
        post_id = self.post["id"]
        updates = {
            query_key("post.getLatestPosts"): without_post(post_id),
        }
        if self.owner.get("username"):
            updates[query_key("post.getPostsAllTypes", username=self.owner["username"])] = (
                without_post(post_id)
            )
        return OptimisticMutation(
            self.ctx.cache,
            mutate=mutate,
            updates=updates,
            invalidate=["post.getLatestPosts", "post.getPostsAllTypes"],
        )

    def request_delete_post(self) -> None:
        """Owner deletion, behind the confirmation modal."""
        if not self.post.get("id"):
            self.ctx.notifier.error("An error occurred while deleting this post.")
            return
        post_id = self.post["id"]
        self.delete_modal.open(
            lambda: self._spawn(
                lambda: self._delete_chain(lambda: self.ctx.api.delete_post(post_id))
            )
        )

    def request_admin_delete_post(self) -> None:
        """Admin deletion, behind its own confirmation modal."""
        if not self.post.get("id"):
            self.ctx.notifier.error("An error occurred while deleting this post.")
            return
        post_id = self.post["id"]
        self.admin_delete_modal.open(
            lambda: self._spawn(
                lambda: self._delete_chain(lambda: self.ctx.api.admin_delete_post(post_id))
            )
        )

    async def _delete_chain(self, mutate: Callable[[], Awaitable[Any]]) -> bool:
        try:
            await self._removal(mutate).run()
        except Exception as e:
            handle_errors(e, "An error occurred while deleting this post.", self.ctx.notifier)
            return False
        self.ctx.notifier.success("Post deleted successfully!")
        self.close()
        return True

    async def confirm_delete(self) -> bool:
        return bool(await self.delete_modal.confirm())

    async def confirm_admin_delete(self) -> bool:
        return bool(await self.admin_delete_modal.confirm())

    async def report(self, reason: Optional[str] = None) -> bool:
        post_id = self.post["id"]

        async def chain() -> bool:
            try:
                await self.ctx.api.report("POST", post_id, reason)
            except Exception as e:
                handle_errors(e, "Failed to submit report.", self.ctx.notifier)
                return False
            self.ctx.notifier.success("Report submitted!")
            return True

        return bool(await self._spawn(chain))

    def share(self) -> str:
        url = self.ctx.navigator.url()
        self.ctx.clipboard.write_text(url)
        self.ctx.notifier.success("Copied post link to clipboard!")
        return url
