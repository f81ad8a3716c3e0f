"""Photo ingestion: store the original, render derivatives, record the photo."""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Iterable, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.core.config import settings
from photomarket.core.exceptions import (
    NotFoundException,
    StorageException,
    ValidationException,
)
from photomarket.imaging import DerivativeGenerator
from photomarket.models.database import Photo
from photomarket.models.schemas import PhotoMetadata
from photomarket.repositories import AlbumRepository, PhotoRepository
from photomarket.services.cover_queue import CoverTaskQueue
from photomarket.services.storage_service import StorageService
from photomarket.services.worker_pool import ImageWorkerPool

logger = logging.getLogger(__name__)

ALLOWED_MIME_PREFIX = "image/"


@dataclass
class IncomingPhoto:
    """An upload as received at the HTTP boundary."""

    filename: str
    content_type: Optional[str]
    stream: BinaryIO
    size: Optional[int] = None


def validate_upload(upload: IncomingPhoto, max_bytes: Optional[int] = None):
    """
    Reject uploads before any work is done.

    Raises:
        ValidationException: Missing file or non-image MIME type (400),
            declared size over the limit (413)
    """
    max_bytes = max_bytes or settings.max_upload_bytes

    if upload is None or not upload.filename:
        raise ValidationException("No file uploaded")
    if not upload.content_type or not upload.content_type.startswith(ALLOWED_MIME_PREFIX):
        raise ValidationException("Only image files are allowed")
    if upload.size is not None and upload.size > max_bytes:
        raise ValidationException(
            f"File exceeds the {max_bytes} byte upload limit",
            status_code=413
        )


def _normalize_date_taken(date_taken: Optional[str]) -> str:
    if not date_taken:
        return datetime.now(timezone.utc).isoformat()
    try:
        return datetime.fromisoformat(date_taken.replace("Z", "+00:00")).isoformat()
    except ValueError as e:
        raise ValidationException(f"Invalid date_taken '{date_taken}', expected ISO-8601") from e


class IngestionService:
    """Service orchestrating the upload pipeline."""

    def __init__(
        self,
        db: AsyncSession,
        storage: StorageService,
        pool: ImageWorkerPool,
        cover_queue: Optional[CoverTaskQueue] = None,
        generator: Optional[DerivativeGenerator] = None
    ):
        """
        Initialize ingestion service.

        Args:
            db: Database session
            storage: Storage service
            pool: Worker pool running the image work
            cover_queue: Queue receiving the automatic cover job
            generator: Derivative generator, a default one when omitted
        """
        self.db = db
        self.storage = storage
        self.pool = pool
        self.cover_queue = cover_queue
        self.generator = generator or DerivativeGenerator()
        self.album_repo = AlbumRepository(db)
        self.photo_repo = PhotoRepository(db)
        self.max_upload_bytes = settings.max_upload_bytes

    async def ingest(
        self,
        album_id: UUID,
        upload: IncomingPhoto,
        price: Optional[int] = None,
        date_taken: Optional[str] = None,
        description: Optional[str] = None
    ) -> Photo:
        """
        Ingest one uploaded photo into an album.

        The original is stored, thumbnail and watermarked copy are rendered on
        the worker pool, and the photo is committed. When this is the album's
        first photo and the album has no cover, a cover job is queued after
        the commit.

        Args:
            album_id: Target album
            upload: The uploaded file
            price: Unit price in yen, the configured default when omitted
            date_taken: ISO-8601 capture date, upload time when omitted
            description: Free text, empty when omitted

        Returns:
            Persisted photo

        Raises:
            ValidationException: Upload rejected
            NotFoundException: Album doesn't exist
            StorageException: Original could not be stored
            DerivativeGenerationException: Thumbnail or watermark failed
        """
        validate_upload(upload, self.max_upload_bytes)
        if price is not None and price < 0:
            raise ValidationException("Price must not be negative")
        date_taken = _normalize_date_taken(date_taken)

        album = await self.album_repo.get_by_id_or_fail(album_id)
        had_photos = await self.photo_repo.count_by_album(album_id) > 0
        had_cover = bool(album.cover_image)

        stored_name = self.storage.generate_filename(upload.filename)
        original_path = self.storage.get_original_path(stored_name)
        thumbnail_path = self.storage.get_thumbnail_path(stored_name)
        watermarked_path = self.storage.get_watermarked_path(stored_name)
        created_paths = (original_path, thumbnail_path, watermarked_path)

        committed = False
        try:
            size = await self.pool.run(
                self.storage.save_upload,
                upload.stream,
                original_path,
                self.max_upload_bytes
            )
            logger.info("Stored original %s (%d bytes) for album %s", stored_name, size, album_id)

            await self.pool.run(
                self.generator.generate_thumbnail,
                original_path,
                thumbnail_path,
                settings.thumbnail_size
            )
            await self.pool.run(
                self.generator.generate_watermarked,
                original_path,
                watermarked_path
            )

            metadata = PhotoMetadata(
                date_taken=date_taken,
                description=description or "",
                file_path=str(original_path),
            )
            photo = await self.photo_repo.create(Photo(
                album_id=album_id,
                filename=PurePosixPath(upload.filename.replace("\\", "/")).name,
                original_url=self.storage.original_url(stored_name),
                thumbnail_url=self.storage.thumbnail_url(stored_name),
                watermarked_url=self.storage.watermarked_url(stored_name),
                price=price if price is not None else settings.default_photo_price,
                extra_metadata=metadata.model_dump(),
            ))
            await self.db.commit()
            committed = True
        finally:
            # Runs on cancellation too
            if not committed:
                self._discard(created_paths)
                await self.db.rollback()

        logger.info("Ingested photo %s into album %s", photo.id, album_id)

        if not had_photos and not had_cover and self.cover_queue is not None:
            await self.cover_queue.submit(album_id)

        return photo

    async def regenerate_derivatives(self, photo_id: UUID) -> Photo:
        """
        Re-render thumbnail and watermarked copy of a photo from its original.

        Raises:
            NotFoundException: Photo or its original doesn't exist
            DerivativeGenerationException: Rendering failed
        """
        photo = await self.photo_repo.get_by_id_or_fail(photo_id)
        source = self.storage.resolve_original_path(photo)
        if not self.storage.file_exists(source):
            raise NotFoundException(resource="Original file", identifier=str(photo_id))

        stored_name = source.name
        await self.pool.run(
            self.generator.generate_thumbnail,
            source,
            self.storage.get_thumbnail_path(stored_name),
            settings.thumbnail_size
        )
        await self.pool.run(
            self.generator.generate_watermarked,
            source,
            self.storage.get_watermarked_path(stored_name)
        )

        updated = await self.photo_repo.update(photo_id, {
            "thumbnail_url": self.storage.thumbnail_url(stored_name),
            "watermarked_url": self.storage.watermarked_url(stored_name),
        })
        logger.info("Regenerated derivatives of photo %s", photo_id)
        return updated

    def _discard(self, paths: Iterable[Path]):
        for path in paths:
            try:
                self.storage.delete_file(path)
            except StorageException as e:
                logger.warning("Cleanup after failed ingestion left %s: %s", path, e.message)
