"""
Per-album "cover requested" flag.

The automatic cover job may be requested by several concurrent first
uploads to the same album; the guard lets exactly one of them through.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional, Set
from uuid import UUID

from photomarket.core.config import settings
from photomarket.core.redis import RedisClient, redis_client

logger = logging.getLogger(__name__)


class CoverRequestGuard(ABC):
    """Atomic test-and-set keyed by album."""

    @abstractmethod
    async def try_acquire(self, album_id: UUID) -> bool:
        """Return True only for the first caller for this album."""

    @abstractmethod
    async def release(self, album_id: UUID):
        """Forget the flag so the album may be requested again."""


class InMemoryCoverGuard(CoverRequestGuard):
    """
    Guard for a single process.

    ``try_acquire`` has no await between the check and the insert, so it is
    atomic with respect to other coroutines on the loop.
    """

    def __init__(self):
        self._requested: Set[UUID] = set()

    async def try_acquire(self, album_id: UUID) -> bool:
        if album_id in self._requested:
            return False
        self._requested.add(album_id)
        return True

    async def release(self, album_id: UUID):
        self._requested.discard(album_id)

    def clear(self):
        self._requested.clear()


class RedisCoverGuard(CoverRequestGuard):
    """Guard shared by several server processes through redis SET NX."""

    KEY_PREFIX = "cover-requested"

    def __init__(self, client: Optional[RedisClient] = None, ttl_seconds: Optional[int] = None):
        self.client = client or redis_client
        self.ttl_seconds = ttl_seconds or settings.cover_guard_ttl_seconds

    def _key(self, album_id: UUID) -> str:
        return f"{self.KEY_PREFIX}:{album_id}"

    async def try_acquire(self, album_id: UUID) -> bool:
        return await self.client.set_if_absent(self._key(album_id), "1", ex=self.ttl_seconds)

    async def release(self, album_id: UUID):
        await self.client.delete(self._key(album_id))


def create_cover_guard(backend: Optional[str] = None) -> CoverRequestGuard:
    """Build the guard selected by ``cover_guard_backend``."""
    backend = backend or settings.cover_guard_backend
    if backend == "redis":
        logger.info("Using redis cover guard")
        return RedisCoverGuard()
    return InMemoryCoverGuard()
