"""Redis client configuration and utilities."""
from typing import Optional
import redis.asyncio as redis

from .config import settings


class RedisClient:
    """Async Redis client wrapper with utility methods."""

    def __init__(self, url: Optional[str] = None):
        self._url = url or settings.redis_url
        self._client: Optional[redis.Redis] = None

    @property
    def configured(self) -> bool:
        return bool(self._url)

    async def connect(self):
        """Initialize Redis connection."""
        if self._client is None:
            if not self._url:
                raise RuntimeError("REDIS_URL is not configured")
            self._client = redis.from_url(
                self._url,
                encoding="utf-8",
                decode_responses=True
            )

    async def disconnect(self):
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def set_if_absent(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        """
        Atomically set key only if it does not exist yet.

        Args:
            key: Cache key
            value: Value to store
            ex: Expiration time in seconds

        Returns:
            True if this call created the key
        """
        await self.connect()
        return bool(await self._client.set(key, value, ex=ex, nx=True))

    async def delete(self, key: str):
        """Delete key."""
        await self.connect()
        await self._client.delete(key)

    async def ping(self) -> bool:
        """Check if Redis is accessible."""
        try:
            await self.connect()
            return await self._client.ping()
        except Exception:
            return False


# Singleton instance
redis_client = RedisClient()
