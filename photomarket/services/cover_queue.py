"""Background queue for automatic album cover generation."""
import asyncio
import logging
from typing import Callable, Optional, Set
from uuid import UUID

from photomarket.core.database import get_db_context
from photomarket.core.exceptions import PhotoStoreException
from photomarket.services.cover_guard import CoverRequestGuard
from photomarket.services.cover_service import CoverService
from photomarket.services.storage_service import StorageService
from photomarket.services.worker_pool import ImageWorkerPool

logger = logging.getLogger(__name__)


class CoverTaskQueue:
    """
    Runs automatic cover jobs as fire-and-forget tasks.

    Each job opens its own database session; the uploading request has
    already committed its photo and returned by the time the job reads it.
    Failures are logged and never reach the uploader.
    """

    def __init__(
        self,
        guard: CoverRequestGuard,
        storage: StorageService,
        pool: ImageWorkerPool,
        session_factory: Optional[Callable] = None
    ):
        self.guard = guard
        self.storage = storage
        self.pool = pool
        self.session_factory = session_factory or get_db_context
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def submit(self, album_id: UUID) -> bool:
        """
        Schedule a cover job unless one was already requested for the album.

        Returns:
            True if a job was scheduled
        """
        if not await self.guard.try_acquire(album_id):
            logger.debug("Cover already requested for album %s", album_id)
            return False

        task = asyncio.create_task(self._run(album_id), name=f"cover-{album_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def _run(self, album_id: UUID):
        try:
            async with self.session_factory() as db:
                service = CoverService(db, self.storage, self.pool)
                await service.select_and_generate_cover(album_id)
        except PhotoStoreException as e:
            logger.error("Automatic cover for album %s failed: %s", album_id, e.message)
        except Exception:
            logger.exception("Automatic cover for album %s crashed", album_id)

    async def drain(self):
        """Wait until every scheduled job has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
