"""Album repository."""
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.models.database import Album, Photo
from photomarket.repositories.base import BaseRepository


class AlbumRepository(BaseRepository[Album]):
    """Repository for album operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(Album, db)

    async def get_by_category(
        self,
        category_id: UUID,
        published_only: bool = True,
        skip: int = 0,
        limit: int = 100
    ) -> List[Album]:
        """
        Get albums of a category, newest first.

        Args:
            category_id: Category UUID
            published_only: Hide unpublished albums
            skip: Number of records to skip
            limit: Maximum number of records

        Returns:
            List of albums
        """
        query = select(Album).where(Album.category_id == category_id)
        if published_only:
            query = query.where(Album.is_published.is_(True))

        result = await self.db.execute(
            query.order_by(Album.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def update_cover(self, album_id: UUID, cover_url: Optional[str]) -> Optional[Album]:
        """Set (or clear) the album cover URL."""
        return await self.update(album_id, {"cover_image": cover_url})

    async def set_published(self, album_ids: List[UUID], is_published: bool) -> int:
        """
        Publish or unpublish several albums.

        Returns:
            Number of albums updated
        """
        return await self.update_where(Album.id.in_(album_ids), is_published=is_published)

    async def count_photos(self, album_ids: List[UUID]) -> Dict[UUID, int]:
        """
        Count photos per album in one query.

        Returns:
            Mapping of album id to photo count; albums without photos map to 0
        """
        counts = {album_id: 0 for album_id in album_ids}
        if not album_ids:
            return counts

        result = await self.db.execute(
            select(Photo.album_id, func.count(Photo.id))
            .where(Photo.album_id.in_(album_ids))
            .group_by(Photo.album_id)
        )
        for album_id, count in result.all():
            counts[album_id] = count
        return counts
