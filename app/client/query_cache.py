"""
Client-side query cache.

Responses are keyed by query identity, e.g. ``("user.getProfile", (("username", "ada"),))``.
The cache is only ever written through ``fetch``, ``set_data``, ``remove``, ``invalidate``
and ``cancel``; nothing else holds a reference to its storage.
"""

import asyncio
import copy
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple, Union

from app.core.logging import get_logger

logger = get_logger(__name__)

QueryKey = Tuple[str, Tuple[Tuple[str, Hashable], ...]]
Fetcher = Callable[[], Awaitable[Any]]


def query_key(name: str, **params: Hashable) -> QueryKey:
    """Build a query key from an RPC name and its input."""
    return name, tuple(sorted(params.items()))


class QueryCache:
    """In-memory response cache with cancellable fetches and refetch on invalidate."""

    def __init__(self):
        self._data: Dict[QueryKey, Any] = {}
        self._stale: set = set()
        self._fetchers: Dict[QueryKey, Fetcher] = {}
        # Bumped by cancel(); a fetch only writes if the generation is unchanged.
        self._generations: Dict[QueryKey, int] = {}
        self._inflight: Dict[QueryKey, "asyncio.Task[Any]"] = {}

    def get_data(self, key: QueryKey) -> Optional[Any]:
        """Cached value for ``key`` (a copy, so callers cannot mutate the cache)."""
        return copy.deepcopy(self._data.get(key))

    def set_data(self, key: QueryKey, value: Union[Any, Callable[[Any], Any]]) -> None:
        """Replace the cached value; a callable receives the previous value."""
        if callable(value):
            value = value(self.get_data(key))
        self._data[key] = value
        self._stale.discard(key)

    def remove(self, key: QueryKey) -> None:
        self._data.pop(key, None)
        self._stale.discard(key)

    def is_stale(self, key: QueryKey) -> bool:
        return key in self._stale

    async def fetch(self, key: QueryKey, fetcher: Fetcher) -> Any:
        """
        Run ``fetcher`` and store its result under ``key``.

        The fetcher is remembered so ``invalidate`` can refetch the query later.
        The result is dropped if ``cancel(key)`` ran while the fetch was in flight.
        """
        self._fetchers[key] = fetcher
        generation = self._generations.get(key, 0)

        task = asyncio.ensure_future(fetcher())
        self._inflight[key] = task
        try:
            result = await task
        except asyncio.CancelledError:
            if self._generations.get(key, 0) != generation:
                logger.debug(f"Fetch for {key[0]} cancelled")
                return None
            raise
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

        if self._generations.get(key, 0) != generation:
            logger.debug(f"Discarding cancelled fetch for {key[0]}")
            return result

        self.set_data(key, result)
        return result

    async def cancel(self, key: QueryKey) -> None:
        """Cancel an in-flight fetch for ``key`` so it cannot overwrite newer data."""
        self._generations[key] = self._generations.get(key, 0) + 1
        task = self._inflight.pop(key, None)
        if task is not None and not task.done():
            task.cancel()

    def _matching(self, target: Union[str, QueryKey]):
        if isinstance(target, str):
            known = set(self._data) | set(self._fetchers)
            return [key for key in known if key[0] == target]
        return [target]

    async def invalidate(self, target: Union[str, QueryKey], refetch: bool = True) -> None:
        """
        Mark queries stale and refetch the ones with a known fetcher.

        ``target`` is either a full key or an RPC name, which matches every input.
        Refetch failures leave the stale value in place.
        """
        for key in self._matching(target):
            self._stale.add(key)
            fetcher = self._fetchers.get(key)
            if not refetch or fetcher is None:
                continue
            try:
                await self.fetch(key, fetcher)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Refetch of {key[0]} failed: {e}")

