"""Per-company scope locks (implement IScopeLock).

InProcessScopeLock is enough for a single worker. With several workers
sharing one task store, RedisScopeLock serializes propagation for a
company across all of them.
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from redis.exceptions import LockError

from aigency.domain.exceptions import ScopeLockTimeoutException
from aigency.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

LOCK_KEY_PREFIX = "aigency:scope-lock:"


class InProcessScopeLock:
    """One asyncio.Lock per company, dropped once no coroutine references it."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, company_id: str) -> asyncio.Lock:
        lock = self._locks.get(company_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[company_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, company_id: str) -> AsyncIterator[None]:
        lock = self._lock_for(company_id)
        async with lock:
            yield


class RedisScopeLock:
    """Distributed lock per company on Redis.

    The lock expires after timeout_seconds so a crashed worker cannot block
    a company forever; acquisition gives up after wait_seconds.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        *,
        timeout_seconds: int = 30,
        wait_seconds: float = 10.0,
    ) -> None:
        self._redis = redis_client
        self._timeout = timeout_seconds
        self._wait = wait_seconds

    @asynccontextmanager
    async def hold(self, company_id: str) -> AsyncIterator[None]:
        lock = self._redis.lock(
            f"{LOCK_KEY_PREFIX}{company_id}",
            timeout=self._timeout,
            blocking_timeout=self._wait,
        )
        try:
            acquired = await lock.acquire()
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error("Redis unavailable for scope lock of company %s: %s", company_id, e)
            raise ScopeLockTimeoutException(company_id, self._wait) from e
        if not acquired:
            raise ScopeLockTimeoutException(company_id, self._wait)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Expired while held; another worker may already own it.
                logger.warning("Scope lock for company %s expired before release", company_id)
