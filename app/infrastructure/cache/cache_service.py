"""
Cache service for profile views.
Profile views are cached per username and dropped whenever a mutation changes them.
"""

from typing import Any, Optional, Union, Callable, Awaitable
from datetime import timedelta
import hashlib
import json

from app.infrastructure.cache.redis_client import get_redis_client
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

PROFILE_PREFIX = "profile"


class CacheService:
    """High-level cache service with the get-or-set and invalidation patterns."""

    def __init__(self):
        """Initialize cache service."""
        self._redis_client = None

    async def _get_client(self):
        """Get Redis client instance."""
        if not self._redis_client:
            self._redis_client = await get_redis_client()
        return self._redis_client

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        client = await self._get_client()
        return await client.get(key)

    async def set(
        self,
        key: str,
        value: Any,
        expire: Optional[Union[int, timedelta]] = None
    ) -> bool:
        """Set value in cache."""
        client = await self._get_client()
        return await client.set(key, value, expire)

    def generate_key(self, prefix: str, *args, **kwargs) -> str:
        """
        Generate a cache key from prefix and arguments.

        Args:
            prefix (str): Key prefix
            *args: Positional arguments to include in key
            **kwargs: Keyword arguments to include in key

        Returns:
            str: Generated cache key
        """
        key_parts = [prefix]

        for arg in args:
            if isinstance(arg, (dict, list)):
                key_parts.append(json.dumps(arg, sort_keys=True))
            else:
                key_parts.append(str(arg))

        for key, value in sorted(kwargs.items()):
            if isinstance(value, (dict, list)):
                key_parts.append(f"{key}:{json.dumps(value, sort_keys=True)}")
            else:
                key_parts.append(f"{key}:{value}")

        key_string = ":".join(key_parts)
        if len(key_string) > 250:
            key_hash = hashlib.md5(key_string.encode()).hexdigest()
            return f"{prefix}:{key_hash}"

        return key_string

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        expire: Optional[Union[int, timedelta]] = None
    ) -> Any:
        """
        Get value from cache or set it using factory function.

        Args:
            key (str): Cache key
            factory (Callable): Async function to generate value if not cached
            expire (Optional[Union[int, timedelta]]): Expiration time

        Returns:
            Any: Cached or generated value
        """
        cached_value = await self.get(key)
        if cached_value is not None:
            logger.debug(f"Cache hit for key: {key}")
            return cached_value

        logger.debug(f"Cache miss for key: {key}, generating new value")
        new_value = await factory()

        if new_value is not None:
            await self.set(key, new_value, expire)

        return new_value

    async def invalidate_pattern(self, pattern: str) -> int:
        """
        Invalidate all keys matching a pattern.

        Args:
            pattern (str): Redis key pattern (supports * wildcards)

        Returns:
            int: Number of keys deleted
        """
        client = await self._get_client()
        keys = await client.scan_keys(pattern)
        if not keys:
            return 0
        deleted_count = await client.delete(*keys)
        logger.info(f"Invalidated {deleted_count} keys matching pattern: {pattern}")
        return deleted_count

    def profile_key(self, username: str, viewer_id: Optional[str] = None) -> str:
        """Key for a profile view as seen by one viewer (likes differ per viewer)."""
        return self.generate_key(PROFILE_PREFIX, username, viewer=viewer_id or "anonymous")

    async def get_or_set_profile(
        self,
        username: str,
        viewer_id: Optional[str],
        factory: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Cached profile view for a username/viewer pair."""
        return await self.get_or_set(
            self.profile_key(username, viewer_id),
            factory,
            expire=settings.PROFILE_CACHE_TTL_SECONDS,
        )

    async def invalidate_profile(self, *usernames: str) -> int:
        """Drop every cached view of the given profiles."""
        deleted = 0
        for username in usernames:
            if username:
                deleted += await self.invalidate_pattern(f"{PROFILE_PREFIX}:{username}:*")
        return deleted


# Global cache service instance
cache_service = CacheService()

