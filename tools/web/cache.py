"""Shared result caches keyed by the search page cache key."""

import json
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from models.search_results import ResultBundle
from orchestrator.errors import CacheError
from utils.logger import get_logger

logger = get_logger(__name__)


def _check_batch(bundles: Sequence[ResultBundle], keys: Sequence[str]) -> None:
    if len(bundles) != len(keys):
        raise ValueError(f"put() needs one key per bundle, got {len(bundles)} bundles and {len(keys)} keys")


class SharedCache(ABC):
    """
    Async cache of serialized ResultBundles.

    Implementations raise CacheError on backend failures and never assume
    exclusive access: concurrent writers to the same key race, last write wins.
    """

    @abstractmethod
    async def get(self, key: str) -> ResultBundle | None:
        """Return the cached bundle for key, or None on a miss."""

    @abstractmethod
    async def put(self, bundles: Sequence[ResultBundle], keys: Sequence[str]) -> None:
        """Store bundles under the keys at the same positions."""

    async def close(self) -> None:
        """Release backend resources."""


class InMemoryTTLCache(SharedCache):
    """
    Thread-safe in-memory cache with TTL (Time To Live).

    Values are stored as JSON text, so callers always get a fresh copy and
    mutating a returned bundle never leaks back into the cache. Every put
    sweeps expired entries and, past max_entries, evicts the oldest writes.
    """

    def __init__(self, ttl_seconds: int, max_entries: int | None = None):
        """
        Initialize cache with TTL.

        Args:
            ttl_seconds: Time to live in seconds for cached entries
            max_entries: Upper bound on stored entries (None for unbounded)
        """
        self._cache: dict[str, tuple[str, datetime]] = {}
        self._lock = threading.Lock()
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_entries = max_entries

    def _purge_locked(self, now: datetime) -> None:
        """Drop expired entries, then the oldest ones over the size cap. Caller holds the lock."""
        expired = [key for key, (_, expiry) in self._cache.items() if now >= expiry]
        for key in expired:
            del self._cache[key]

        if self._max_entries is not None:
            overflow = len(self._cache) - self._max_entries
            for key in list(self._cache)[:max(overflow, 0)]:
                del self._cache[key]

    async def get(self, key: str) -> ResultBundle | None:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            payload, expiry = entry
            if datetime.now(timezone.utc) >= expiry:
                # Expired - remove it
                del self._cache[key]
                return None
        return ResultBundle.from_dict(json.loads(payload))

    async def put(self, bundles: Sequence[ResultBundle], keys: Sequence[str]) -> None:
        _check_batch(bundles, keys)
        now = datetime.now(timezone.utc)
        expiry = now + self._ttl
        payloads = [json.dumps(bundle.to_dict()) for bundle in bundles]
        with self._lock:
            for key, payload in zip(keys, payloads):
                # re-inserting moves the key to the newest position
                self._cache.pop(key, None)
                self._cache[key] = (payload, expiry)
            self._purge_locked(now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def clear(self):
        """Clear all cached entries."""
        with self._lock:
            self._cache.clear()


class RedisCache(SharedCache):
    """Redis-backed cache; entries expire through SETEX."""

    def __init__(self, redis_url: str, ttl_seconds: int, key_prefix: str = ""):
        """
        Initialize Redis cache.

        Args:
            redis_url: Redis connection URL
            ttl_seconds: Entry lifetime in seconds
            key_prefix: Optional namespace prepended to every key
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self._redis: aioredis.Redis | None = None

    def _get_redis(self) -> aioredis.Redis:
        """Get or lazily create the Redis client."""
        if self._redis is None:
            self._redis = aioredis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)
        return self._redis

    async def get(self, key: str) -> ResultBundle | None:
        try:
            payload = await self._get_redis().get(self.key_prefix + key)
        except RedisError as e:
            raise CacheError(f"Redis read failed: {e}") from e

        if payload is None:
            return None
        try:
            return ResultBundle.from_dict(json.loads(payload))
        except (ValueError, TypeError) as e:
            raise CacheError(f"Corrupt cache entry for key {key!r}: {e}") from e

    async def put(self, bundles: Sequence[ResultBundle], keys: Sequence[str]) -> None:
        _check_batch(bundles, keys)
        try:
            async with self._get_redis().pipeline(transaction=False) as pipe:
                for bundle, key in zip(bundles, keys):
                    pipe.setex(self.key_prefix + key, self.ttl_seconds, json.dumps(bundle.to_dict()))
                await pipe.execute()
        except RedisError as e:
            raise CacheError(f"Redis write failed: {e}") from e

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
