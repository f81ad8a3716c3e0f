"""Album cover selection and generation."""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.core.config import settings
from photomarket.core.exceptions import (
    CoverGenerationException,
    DerivativeGenerationException,
    StorageException,
)
from photomarket.imaging import DerivativeGenerator
from photomarket.models.database import Album
from photomarket.repositories import AlbumRepository, PhotoRepository
from photomarket.services.storage_service import StorageService
from photomarket.services.worker_pool import ImageWorkerPool

logger = logging.getLogger(__name__)


class CoverService:
    """Builds an album cover from the album's first uploaded photo."""

    def __init__(
        self,
        db: AsyncSession,
        storage: StorageService,
        pool: ImageWorkerPool,
        generator: Optional[DerivativeGenerator] = None
    ):
        """
        Initialize cover service.

        Args:
            db: Database session
            storage: Storage service
            pool: Worker pool running the image work
            generator: Derivative generator, a default one when omitted
        """
        self.db = db
        self.storage = storage
        self.pool = pool
        self.generator = generator or DerivativeGenerator()
        self.album_repo = AlbumRepository(db)
        self.photo_repo = PhotoRepository(db)
        self.cover_size = settings.cover_size

    async def select_and_generate_cover(self, album_id: UUID) -> Optional[Album]:
        """
        Generate a cover from the earliest photo of an album.

        Args:
            album_id: Album UUID

        Returns:
            Updated album, or None when the album has no photos

        Raises:
            NotFoundException: If the album doesn't exist
            CoverGenerationException: If the original is missing or unreadable
        """
        album = await self.album_repo.get_by_id_or_fail(album_id)
        previous_cover = album.cover_image

        photo = await self.photo_repo.get_earliest_in_album(album_id)
        if photo is None:
            logger.info("No photos in album %s, cover not generated", album_id)
            return None

        source = self.storage.resolve_original_path(photo)
        if not self.storage.file_exists(source):
            raise CoverGenerationException(
                f"original of photo {photo.id} not found at {source}"
            )

        cover_name = self.storage.cover_filename(album_id)
        cover_path = self.storage.get_cover_path(cover_name)
        try:
            await self.pool.run(
                self.generator.generate_thumbnail,
                source,
                cover_path,
                self.cover_size
            )
        except DerivativeGenerationException as e:
            raise CoverGenerationException(e.message) from e

        album = await self.album_repo.update_cover(album_id, self.storage.cover_url(cover_name))
        await self.db.commit()
        logger.info("Album %s cover generated from photo %s", album_id, photo.id)

        self._discard_previous(album_id, previous_cover)
        return album

    def _discard_previous(self, album_id: UUID, cover_url: Optional[str]):
        """Remove the cover file a regeneration replaced, if this service made it."""
        path = self.storage.generated_cover_path(album_id, cover_url)
        try:
            self.storage.delete_file(path)
        except StorageException as e:
            logger.warning("Could not remove old cover of album %s: %s", album_id, e.message)
