"""Album and photo catalog management."""
import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.core.exceptions import NotFoundException, StorageException
from photomarket.models.database import Album, Photo
from photomarket.models.schemas import AlbumCreate
from photomarket.repositories import AlbumRepository, PhotoRepository
from photomarket.services.storage_service import StorageService

logger = logging.getLogger(__name__)


class AlbumService:
    """
    Service for album and photo operations.

    Read methods take ``include_unpublished``; callers pass True only for
    admins. An unpublished album and its photos look exactly like missing
    ones to everybody else.
    """

    def __init__(self, db: AsyncSession, storage: StorageService):
        """
        Initialize album service.

        Args:
            db: Database session
            storage: Storage service
        """
        self.db = db
        self.storage = storage
        self.repo = AlbumRepository(db)
        self.photo_repo = PhotoRepository(db)

    async def get_album(self, album_id: UUID, include_unpublished: bool = False) -> Album:
        """
        Get album by ID.

        Raises:
            NotFoundException: If album not found or hidden from the caller
        """
        album = await self.repo.get_by_id_or_fail(album_id)
        if not album.is_published and not include_unpublished:
            raise NotFoundException("Album", str(album_id))
        return album

    async def count_photos(self, album_id: UUID) -> int:
        return await self.photo_repo.count_by_album(album_id)

    async def list_category_albums(
        self,
        category_id: UUID,
        include_unpublished: bool = False,
        skip: int = 0,
        limit: int = 100
    ) -> List[Tuple[Album, int]]:
        """
        List albums of a category with their photo counts.

        Returns:
            List of (album, photo count) tuples, newest album first
        """
        albums = await self.repo.get_by_category(
            category_id,
            published_only=not include_unpublished,
            skip=skip,
            limit=limit
        )
        counts = await self.repo.count_photos([album.id for album in albums])
        return [(album, counts[album.id]) for album in albums]

    async def list_album_photos(
        self,
        album_id: UUID,
        include_unpublished: bool = False,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Photo]:
        """List photos of a visible album in upload order."""
        await self.get_album(album_id, include_unpublished)
        return await self.photo_repo.get_by_album(album_id, skip=skip, limit=limit)

    async def get_photo(self, photo_id: UUID, include_unpublished: bool = False) -> Photo:
        """
        Get photo by ID.

        Raises:
            NotFoundException: If photo not found or its album is hidden
        """
        photo = await self.photo_repo.get_by_id_or_fail(photo_id)
        if not include_unpublished:
            album = await self.repo.get_by_id(photo.album_id)
            if album is None or not album.is_published:
                raise NotFoundException("Photo", str(photo_id))
        return photo

    async def create_album(self, data: AlbumCreate) -> Album:
        """Create a new album; it stays unpublished unless requested."""
        album = await self.repo.create(Album(**data.model_dump()))
        logger.info("Created album %s (%s)", album.id, album.name)
        return album

    async def update_album(self, album_id: UUID, updates: dict) -> Album:
        """
        Update album metadata.

        Raises:
            NotFoundException: If album not found
        """
        await self.repo.get_by_id_or_fail(album_id)
        updates = {key: value for key, value in updates.items() if value is not None}
        if not updates:
            return await self.repo.get_by_id_or_fail(album_id)
        return await self.repo.update(album_id, updates)

    async def bulk_publish(self, album_ids: List[UUID], is_published: bool) -> int:
        """Publish or unpublish several albums; unknown ids are ignored."""
        updated = await self.repo.set_published(album_ids, is_published)
        logger.info(
            "%s %d of %d albums",
            "Published" if is_published else "Unpublished",
            updated, len(album_ids)
        )
        return updated

    async def set_cover(self, album_id: UUID, cover_url: str) -> Album:
        """Manually override the album cover URL."""
        await self.repo.get_by_id_or_fail(album_id)
        return await self.repo.update_cover(album_id, cover_url)

    async def update_photo_prices(
        self,
        album_id: UUID,
        price: int,
        photo_ids: Optional[List[UUID]] = None
    ) -> int:
        """Set the price of some or all photos of an album."""
        await self.repo.get_by_id_or_fail(album_id)
        return await self.photo_repo.update_prices(album_id, price, photo_ids)

    async def delete_photo(self, photo_id: UUID) -> bool:
        """
        Delete a photo with its original and derivatives.

        The row is committed away first; a failure after that can only
        leave stray files, never a photo pointing at a missing original.

        Raises:
            NotFoundException: If photo not found
        """
        photo = await self.photo_repo.get_by_id_or_fail(photo_id)
        deleted = await self.photo_repo.delete(photo_id)
        await self.db.commit()

        self.storage.delete_photo_files(photo)
        logger.info("Deleted photo %s", photo_id)
        return deleted

    async def delete_album(self, album_id: UUID) -> bool:
        """
        Delete an album, its photos and all of their files.

        Raises:
            NotFoundException: If album not found
        """
        album = await self.repo.get_by_id_or_fail(album_id)
        photos = await self.photo_repo.get_by_album(album_id)

        await self.photo_repo.delete_by_album(album_id)
        deleted = await self.repo.delete(album_id)
        await self.db.commit()

        for photo in photos:
            self.storage.delete_photo_files(photo)

        cover_path = self.storage.generated_cover_path(album_id, album.cover_image)
        try:
            self.storage.delete_file(cover_path)
        except StorageException as e:
            logger.warning("Could not remove cover of album %s: %s", album_id, e.message)
        logger.info("Deleted album %s with %d photos", album_id, len(photos))
        return deleted
