"""Per-URL locks serializing the snapshot-decide-write sequence.

Off by default: without locks two concurrent requests for the same URL may
both create a record, or both refresh the same one. With locks, every
request (single or batch) holds the locks of its URLs from the store read
until its last write. Locks are always taken in sorted order so a batch and
a concurrent request cannot deadlock.
"""

import asyncio
import hashlib
import logging
from abc import ABC, abstractmethod
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .exceptions import StoreError


def lock_order(urls: Iterable[str]) -> List[str]:
    """Distinct URLs in the order locks must be acquired."""
    return sorted(set(urls))


class UrlLocks(ABC):
    """Lock manager keyed by original URL."""

    @abstractmethod
    def lock(self, url: str):
        """Async context manager holding the lock of one URL."""

    @asynccontextmanager
    async def hold(self, urls: Iterable[str]) -> AsyncIterator[None]:
        """Hold the locks of all ``urls`` for the duration of the block."""
        async with AsyncExitStack() as stack:
            for url in lock_order(urls):
                await stack.enter_async_context(self.lock(url))
            yield

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass


class LocalUrlLocks(UrlLocks):
    """asyncio locks, valid within one process (one uvicorn worker)."""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @asynccontextmanager
    async def lock(self, url: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(url, asyncio.Lock())
        self._waiters[url] = self._waiters.get(url, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[url] -= 1
            if not self._waiters[url]:
                del self._waiters[url]
                del self._locks[url]

    def __len__(self) -> int:
        return len(self._locks)


class RedisUrlLocks(UrlLocks):
    """Redis locks, shared by every worker talking to the same Redis."""

    KEY_PREFIX = "ttl_shortener:lock:"

    def __init__(
        self,
        redis_url: str,
        timeout_seconds: float = 10.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis lock manager.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            timeout_seconds: Lease of a lock, and how long to wait for one
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Connect to Redis.

        Raises:
            StoreError: If Redis is unreachable
        """
        self.client = redis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)
        try:
            await self.client.ping()
        except RedisError as e:
            raise StoreError(f"Failed to connect to Redis: {e}") from e
        self.logger.info("Connected to Redis for URL locks")

    def get_lock_key(self, url: str) -> str:
        """Redis key of the lock guarding ``url``."""
        return self.KEY_PREFIX + hashlib.sha256(url.encode()).hexdigest()

    @asynccontextmanager
    async def lock(self, url: str) -> AsyncIterator[None]:
        if self.client is None:
            raise StoreError("Redis lock manager is not connected")

        lock = self.client.lock(
            self.get_lock_key(url),
            timeout=self.timeout_seconds,
            blocking_timeout=self.timeout_seconds,
        )
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            raise StoreError(f"Failed to acquire lock for {url}: {e}") from e
        if not acquired:
            raise StoreError(f"Timed out waiting for lock on {url}")

        try:
            yield
        finally:
            try:
                await lock.release()
            except RedisError as e:
                # Lease already expired; nothing left to release
                self.logger.warning(f"Failed to release lock for {url}: {e}")

    async def close(self) -> None:
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")
