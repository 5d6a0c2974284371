"""
Distributed lock guarding the reciprocal optimizer.

The publisher deletes and re-inserts opportunities and resets boosts
against a single before/after snapshot, so two runs must never overlap.

Lock key: ``optimizer:lock`` (10-minute auto-expiry).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from swapengine.matching_engine.config import RUN_LOCK_KEY, RUN_LOCK_TIMEOUT_SECONDS

if TYPE_CHECKING:
    import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class RunLock:
    """
    Non-blocking Redis lock for optimizer runs.

    Accepts a ``redis`` client on construction so callers (and tests)
    can inject their own connection. Falls back to the module-level
    client from ``swapengine.redis_client``.
    """

    def __init__(
        self,
        redis_client: "aioredis.Redis | None" = None,
        key: str = RUN_LOCK_KEY,
        timeout: int = RUN_LOCK_TIMEOUT_SECONDS,
    ):
        self._redis = redis_client
        self.key = key
        self.timeout = timeout

    @property
    def redis(self) -> "aioredis.Redis":
        if self._redis is not None:
            return self._redis
        from swapengine.redis_client import redis as _default
        return _default

    async def acquire(self) -> "aioredis.lock.Lock | None":
        """
        Try to take the lock (redis-py ``Lock``: SET NX PX, Lua release).

        Returns the Lock object on success, or ``None`` if another run
        holds it.
        """
        lock = self.redis.lock(self.key, timeout=self.timeout, blocking=False)
        if await lock.acquire():
            return lock
        return None

    async def release(self, lock: "aioredis.lock.Lock") -> None:
        try:
            await lock.release()
        except Exception:
            # expired mid-run; the next run can proceed regardless
            logger.warning("Optimizer lock release failed (may have auto-expired)")


run_lock = RunLock()
