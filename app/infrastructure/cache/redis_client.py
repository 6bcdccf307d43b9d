"""
Redis client for the server-side profile cache.
Handles connection management, JSON serialization, and error handling.
"""

import json
import redis.asyncio as redis
from typing import Any, Optional, Union
from datetime import timedelta

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class RedisClient:
    """Redis client with JSON serialization support."""

    def __init__(self, uri: Optional[str] = None, db: Optional[int] = None):
        """Initialize Redis client."""
        self._uri = uri or settings.REDIS_URI
        self._db = settings.REDIS_DB if db is None else db
        self._client: Optional[redis.Redis] = None
        self._connection_pool: Optional[redis.ConnectionPool] = None

    async def connect(self) -> None:
        """Establish connection to Redis server."""
        try:
            self._connection_pool = redis.ConnectionPool.from_url(
                self._uri,
                db=self._db,
                decode_responses=True,
                max_connections=20,
                retry_on_timeout=True
            )
            self._client = redis.Redis(connection_pool=self._connection_pool)

            await self._client.ping()
            logger.info(f"Connected to Redis at {self._uri}")

        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from Redis")

    async def get(self, key: str) -> Optional[Any]:
        """
        Get a JSON value from Redis.

        Args:
            key (str): Cache key

        Returns:
            Optional[Any]: Deserialized value or None if not found or unreachable
        """
        try:
            if not self._client:
                await self.connect()
            value = await self._client.get(key)
            if value is None:
                logger.debug(f"Cache miss for key: {key}")
                return None

            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value

        except Exception as e:
            logger.error(f"Error getting key {key} from Redis: {e}")
            return None

    async def set(
        self,
        key: str,
        value: Any,
        expire: Optional[Union[int, timedelta]] = None
    ) -> bool:
        """
        Store a value as JSON.

        Args:
            key (str): Cache key
            value (Any): Value to cache
            expire (Optional[Union[int, timedelta]]): Expiration in seconds or timedelta

        Returns:
            bool: True if successful, False otherwise
        """
        try:
            if not self._client:
                await self.connect()
            serialized_value = json.dumps(value, default=str)
            result = await self._client.set(key, serialized_value, ex=expire)
            if not result:
                logger.warning(f"Failed to set cache for key: {key}")
            return bool(result)

        except Exception as e:
            logger.error(f"Error setting key {key} in Redis: {e}")
            return False

    async def delete(self, *keys: str) -> int:
        """
        Delete keys from Redis.

        Returns:
            int: Number of keys removed
        """
        if not keys:
            return 0
        try:
            if not self._client:
                await self.connect()
            return await self._client.delete(*keys)
        except Exception as e:
            logger.error(f"Error deleting keys {keys} from Redis: {e}")
            return 0

    async def scan_keys(self, pattern: str) -> list[str]:
        """Collect keys matching a glob pattern without blocking the server."""
        try:
            if not self._client:
                await self.connect()
            return [key async for key in self._client.scan_iter(match=pattern)]
        except Exception as e:
            logger.error(f"Error scanning pattern {pattern} in Redis: {e}")
            return []


# Global Redis client instance
redis_client = RedisClient()


async def get_redis_client() -> RedisClient:
    """
    Get Redis client instance. The connection is opened lazily on first use.

    Returns:
        RedisClient: Redis client instance
    """
    return redis_client
