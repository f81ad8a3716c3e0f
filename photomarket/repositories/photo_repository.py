"""Photo repository."""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.models.database import Photo
from photomarket.repositories.base import BaseRepository


class PhotoRepository(BaseRepository[Photo]):
    """Repository for photo operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(Photo, db)

    async def get_by_album(
        self,
        album_id: UUID,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Photo]:
        """
        Get photos of an album in upload order (oldest first).

        Args:
            album_id: Album UUID
            skip: Number of records to skip
            limit: Maximum number of records, all when None

        Returns:
            List of photos
        """
        query = (
            select(Photo)
            .where(Photo.album_id == album_id)
            .order_by(Photo.created_at.asc(), Photo.id.asc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_earliest_in_album(self, album_id: UUID) -> Optional[Photo]:
        """Get the first photo uploaded to an album."""
        result = await self.db.execute(
            select(Photo)
            .where(Photo.album_id == album_id)
            .order_by(Photo.created_at.asc(), Photo.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def count_by_album(self, album_id: UUID) -> int:
        """Count photos in an album."""
        return await self.count(Photo.album_id == album_id)

    async def update_prices(
        self,
        album_id: UUID,
        price: int,
        photo_ids: Optional[List[UUID]] = None
    ) -> int:
        """
        Set the price of an album's photos.

        Args:
            album_id: Album UUID
            price: New price in yen
            photo_ids: Restrict to these photos; all photos of the album when None

        Returns:
            Number of photos updated
        """
        conditions = [Photo.album_id == album_id]
        if photo_ids is not None:
            conditions.append(Photo.id.in_(photo_ids))
        return await self.update_where(*conditions, price=price)

    async def delete_by_album(self, album_id: UUID) -> int:
        """Delete all photos of an album; returns the number removed."""
        return await self.delete_where(Photo.album_id == album_id)
