"""
Optimistic mutation primitive.

    snapshot -> apply -> confirm | rollback -> reconcile

Every optimistic call site (like toggle, post removal) runs through
``OptimisticMutation`` so the snapshot is always taken before the local
change and each run ends in exactly one confirmation or one rollback.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Union

from app.client.query_cache import QueryCache, QueryKey
from app.core.logging import get_logger

logger = get_logger(__name__)

Updater = Callable[[Any], Any]


class MutationPhase(str, Enum):
    """Lifecycle of a single optimistic run."""

    IDLE = "idle"
    APPLIED = "applied"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


class OptimisticMutation:
    """
    One optimistic write against the query cache.

    Args:
        cache: Query cache holding the affected views
        mutate: Coroutine factory issuing the server call
        updates: Per-key functions producing the expected post-mutation value
        invalidate: Keys or RPC names refetched once the call settles;
            defaults to the keys in ``updates``
    """

    def __init__(
        self,
        cache: QueryCache,
        mutate: Callable[[], Awaitable[Any]],
        updates: Optional[Dict[QueryKey, Updater]] = None,
        invalidate: Optional[Iterable[Union[str, QueryKey]]] = None,
    ):
        self.cache = cache
        self.mutate = mutate
        self.updates = dict(updates or {})
        self.invalidate_targets = (
            list(invalidate) if invalidate is not None else list(self.updates)
        )
        self.snapshots: Dict[QueryKey, Any] = {}
        self.phase = MutationPhase.IDLE

    async def _apply(self) -> None:
        for key, update in self.updates.items():
            await self.cache.cancel(key)
            previous = self.cache.get_data(key)
            self.snapshots[key] = previous
            if previous is None:
                continue
            self.cache.set_data(key, update(previous))
        self.phase = MutationPhase.APPLIED

    def _rollback(self) -> None:
        if self.phase is not MutationPhase.APPLIED:
            return
        for key, previous in self.snapshots.items():
            if previous is None:
                continue
            self.cache.set_data(key, previous)
        self.phase = MutationPhase.ROLLED_BACK

    def _confirm(self) -> None:
        if self.phase is MutationPhase.APPLIED:
            self.phase = MutationPhase.CONFIRMED

    async def _reconcile(self) -> None:
        for target in self.invalidate_targets:
            await self.cache.invalidate(target)

    async def run(self) -> Any:
        """
        Apply the optimistic values, call the server, then confirm or roll back.

        Server errors are re-raised after the rollback. A cancelled run rolls
        back and skips the refetch, so nothing is written after cancellation.
        """
        if self.phase is not MutationPhase.IDLE:
            raise RuntimeError("OptimisticMutation instances are single use")

        await self._apply()
        try:
            result = await self.mutate()
        except asyncio.CancelledError:
            self._rollback()
            raise
        except Exception:
            self._rollback()
            logger.debug("Optimistic update rolled back")
            await self._reconcile()
            raise

        self._confirm()
        await self._reconcile()
        return result
