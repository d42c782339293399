"""Key/value cache stores with TTL.

Values are JSON-serializable structures; both backends store the JSON text
so a cached value reads back exactly as it was written.
"""
import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

import redis.asyncio as redis

from ..config.settings import CacheSettings
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    """Cache contract used by the services."""

    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def delete_prefix(self, prefix: str) -> int:
        ...

    async def close(self) -> None:
        ...


class RedisCache:
    """Redis-backed cache."""

    def __init__(self, client: redis.Redis, default_ttl: int = 300):
        self.client = client
        self.default_ttl = default_ttl

    @classmethod
    def from_url(cls, url: str, default_ttl: int = 300) -> "RedisCache":
        client = redis.from_url(url, decode_responses=True)
        logger.info("Redis cache client created")
        return cls(client, default_ttl=default_ttl)

    async def get(self, key: str) -> Optional[Any]:
        raw = await self.client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        await self.client.set(key, json.dumps(value), ex=ttl or self.default_ttl)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with `prefix`."""
        keys = [key async for key in self.client.scan_iter(match=f"{prefix}*")]
        if not keys:
            return 0
        return await self.client.delete(*keys)

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("Redis cache client closed")


class MemoryCache:
    """In-process cache with per-entry expiry."""

    def __init__(
        self,
        default_ttl: int = 300,
        clock: Callable[[], float] = time.monotonic
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, str]] = {}

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, raw = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        now = self._clock()
        self._prune(now)
        expires_at = now + (ttl or self.default_ttl)
        self._entries[key] = (expires_at, json.dumps(value))

    def _prune(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with `prefix`."""
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    async def close(self) -> None:
        self._entries.clear()


def build_cache(cache_settings: CacheSettings) -> CacheStore:
    """Create the cache store selected by configuration."""
    backend = cache_settings.backend.lower()

    if backend == "redis":
        return RedisCache.from_url(
            cache_settings.redis_url,
            default_ttl=cache_settings.ttl_seconds
        )
    if backend == "memory":
        logger.info("Using in-process cache")
        return MemoryCache(default_ttl=cache_settings.ttl_seconds)

    raise ConfigurationError(f"Unknown cache backend: {cache_settings.backend}")
