"""Cache backends for the tour catalogue."""

import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from redis.asyncio import Redis

from tour_campaign_optimizer.core.exceptions import CacheError

logger = logging.getLogger(__name__)


class TourCache(ABC):
    """Interface for a TTL cache holding JSON-compatible dictionaries."""

    @abstractmethod
    async def get(self, key: str) -> dict[str, Any] | None:
        pass

    @abstractmethod
    async def set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass


class InMemoryTourCache(TourCache):
    """Process-local TTL cache.

    Expiry is checked at read time only. Not thread-safe.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._entries: dict[str, tuple[float, dict[str, Any]]] = {}

    async def get(self, key: str) -> dict[str, Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for key: {key}")
            return None
        expires_at, value = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            logger.debug(f"Cache expired for key: {key}")
            return None
        logger.debug(f"Cache hit for key: {key}")
        return value

    async def set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        self._entries[key] = (self.clock() + ttl, value)
        logger.debug(f"Cache set for key: {key} with TTL={ttl}s")

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None


class RedisTourCache(TourCache):
    """Redis-backed cache shared between processes.

    Values are stored as JSON with ``SETEX`` so Redis handles expiry.

    Examples:
        >>> cache = RedisTourCache.from_url("redis://localhost:6379/0")
        >>> await cache.set("tours:catalogue", {"night-tour": {...}}, ttl=300)
        >>> await cache.get("tours:catalogue")
    """

    def __init__(self, redis: Redis, prefix: str = "tco"):
        """Initialize the cache.

        Args:
            redis: Async Redis client
            prefix: Namespace prepended to every key
        """
        self.redis = redis
        self.prefix = prefix

    @classmethod
    def from_url(cls, redis_url: str, prefix: str = "tco") -> "RedisTourCache":
        """Create a cache from a Redis connection URL."""
        logger.info(f"RedisTourCache initialized with prefix={prefix}")
        return cls(Redis.from_url(redis_url, decode_responses=False), prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> dict[str, Any] | None:
        """Get cached value by key.

        Raises:
            CacheError: If Redis fails
        """
        full_key = self._key(key)
        try:
            data = await self.redis.get(full_key)
        except Exception as e:
            logger.error(f"Redis get error for key {full_key}: {e}")
            raise CacheError(f"Redis get failed for {full_key}: {e}") from e

        if not data:
            logger.debug(f"Cache miss for key: {full_key}")
            return None
        try:
            result: dict[str, Any] = json.loads(data)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to decode cached data for key {full_key}: {e}")
            # Delete corrupted cache entry
            await self.delete(key)
            return None
        logger.debug(f"Cache hit for key: {full_key}")
        return result

    async def set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        """Set cached value with TTL.

        Raises:
            CacheError: If the value cannot be serialized or Redis fails
        """
        full_key = self._key(key)
        try:
            serialized = json.dumps(value)
            await self.redis.setex(full_key, ttl, serialized)
            logger.debug(f"Cache set for key: {full_key} with TTL={ttl}s")
        except TypeError as e:
            logger.error(f"Failed to serialize value for key {full_key}: {e}")
            raise CacheError(f"Value for {full_key} is not JSON serializable") from e
        except Exception as e:
            logger.error(f"Redis set error for key {full_key}: {e}")
            raise CacheError(f"Redis set failed for {full_key}: {e}") from e

    async def delete(self, key: str) -> bool:
        full_key = self._key(key)
        try:
            deleted = bool(await self.redis.delete(full_key))
        except Exception as e:
            logger.error(f"Redis delete error for key {full_key}: {e}")
            raise CacheError(f"Redis delete failed for {full_key}: {e}") from e
        if deleted:
            logger.debug(f"Cache deleted for key: {full_key}")
        else:
            logger.debug(f"Cache key not found for deletion: {full_key}")
        return deleted

    async def ping(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            await self.redis.ping()
            logger.debug("Redis connection healthy")
            return True
        except Exception as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        await self.redis.aclose()
        logger.info("Redis connection closed")
