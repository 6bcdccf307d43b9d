"""
Explicit client context handed to every page controller.
"""

from dataclasses import dataclass, field
from typing import Optional

from app.client.api_client import ApiClient
from app.client.navigation import Clipboard, Navigator
from app.client.notifications import Notifier
from app.client.query_cache import QueryCache, query_key
from app.client.session import SessionHolder


@dataclass
class ClientContext:
    """Query cache, session, toasts and navigation for one browser tab."""

    api: ApiClient
    cache: QueryCache = field(default_factory=QueryCache)
    notifier: Notifier = field(default_factory=Notifier)
    navigator: Navigator = field(default_factory=Navigator)
    clipboard: Clipboard = field(default_factory=Clipboard)
    session: Optional[SessionHolder] = None

    def __post_init__(self):
        if self.session is None:
            self.session = SessionHolder(self.api)

    # Query helpers, one per RPC read
    async def get_me(self):
        return await self.cache.fetch(query_key("user.getMe"), self.api.get_me)

    async def get_profile(self, username: str):
        return await self.cache.fetch(
            query_key("user.getProfile", username=username),
            lambda: self.api.get_profile(username),
        )

    async def get_latest_posts(self):
        return await self.cache.fetch(
            query_key("post.getLatestPosts"), self.api.get_latest_posts
        )

    async def get_posts_all_types(self, username: str):
        return await self.cache.fetch(
            query_key("post.getPostsAllTypes", username=username),
            lambda: self.api.get_posts_all_types(username),
        )
