"""Redis-backed key/value cache.

Used three ways: read-through cache for catalog and user lookups, the
notification dedup ledger, and the dialog state store. Errors from Redis are
not swallowed here; read-through callers decide to fall back to storage.
"""
import json
import logging
from datetime import timedelta
from typing import Any, Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class Cache:
    """Thin async wrapper around a Redis client."""

    def __init__(self, client: redis.Redis):
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> "Cache":
        """Create a cache over a new Redis connection pool."""
        return cls(redis.Redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> Optional[str]:
        """Return the raw value stored under key, or None."""
        return await self._redis.get(key)

    async def set(self, key: str, value: str, ttl: Optional[timedelta] = None) -> None:
        """Store a raw value. No ttl means the key never expires."""
        await self._redis.set(key, value, ex=ttl)

    async def delete(self, key: str) -> None:
        await self._redis.delete(key)

    async def exists(self, key: str) -> bool:
        return bool(await self._redis.exists(key))

    async def get_json(self, key: str) -> Any:
        raw = await self.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Any, ttl: Optional[timedelta] = None) -> None:
        await self.set(key, json.dumps(value, default=str), ttl=ttl)

    async def close(self) -> None:
        """Release the connection pool."""
        await self._redis.aclose()
        logger.info("Closed Redis connection")
