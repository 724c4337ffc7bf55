"""
Storage Module - Persistent key-value store

Provides:
- Singleton async Upstash Redis client
- KeyValueStore protocol consumed by the cart persistence and the API client
- RedisStore, the Redis-backed implementation

Values are plain strings (serialized JSON blobs); callers own the encoding.
"""

from typing import Optional, Protocol

from upstash_redis.asyncio import Redis as AsyncRedis

from storefront import config
from storefront.errors import ERROR_STORAGE_UNAVAILABLE


_redis_client: Optional[AsyncRedis] = None


def get_redis() -> AsyncRedis:
    """
    Get async Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        if not config.UPSTASH_REDIS_REST_URL or not config.UPSTASH_REDIS_REST_TOKEN:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = AsyncRedis(
            url=config.UPSTASH_REDIS_REST_URL,
            token=config.UPSTASH_REDIS_REST_TOKEN,
        )

    return _redis_client


class KeyValueStore(Protocol):
    """Async string key-value store. Every call may fail."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class RedisStore:
    """
    KeyValueStore backed by Upstash Redis.

    Usage:
        store = RedisStore(namespace="device-42")
        await store.set(StorageKeys.CART, blob)
        blob = await store.get(StorageKeys.CART)
    """

    def __init__(self, redis: Optional[AsyncRedis] = None, namespace: str = ""):
        self._redis = redis  # Lazy initialization when None
        self.namespace = namespace

    @property
    def redis(self) -> AsyncRedis:
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            try:
                self._redis = get_redis()
            except ValueError as e:
                raise ValueError(f"{ERROR_STORAGE_UNAVAILABLE}: {e}")
        return self._redis

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    async def get(self, key: str) -> Optional[str]:
        value = await self.redis.get(self._key(key))
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    async def set(self, key: str, value: str) -> None:
        await self.redis.set(self._key(key), value)

    async def delete(self, key: str) -> None:
        await self.redis.delete(self._key(key))
