"""Base repository with common CRUD operations."""
from typing import Generic, TypeVar, Type, Optional, List
from uuid import UUID

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.core.database import Base
from photomarket.core.exceptions import NotFoundException

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository providing common database operations.

    Writes are flushed but never committed; the request (``get_db``) or the
    background job (``get_db_context``) owning the session decides that.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_by_id_or_fail(self, id: UUID) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            NotFoundException: If entity not found
        """
        entity = await self.get_by_id(id)
        if entity is None:
            raise NotFoundException(resource=self.model.__name__, identifier=str(id))
        return entity

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[ModelType]:
        """Get all entities with pagination, newest first."""
        result = await self.db.execute(
            select(self.model)
            .order_by(self.model.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count(self, *conditions) -> int:
        """Count entities, optionally restricted by SQL conditions."""
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(*conditions)
        )
        return result.scalar_one()

    async def create(self, entity: ModelType) -> ModelType:
        """Add an entity and load its server-side defaults."""
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def update_where(self, *conditions, **values) -> int:
        """
        Bulk update every row matching ``conditions``.

        Loaded instances are synchronized, so objects already in the session
        see the new values.

        Returns:
            Number of rows updated
        """
        result = await self.db.execute(
            update(self.model)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()
        return result.rowcount

    async def update(self, id: UUID, values: dict) -> Optional[ModelType]:
        """
        Update entity by ID.

        Returns:
            Refreshed entity or None if not found
        """
        if not await self.update_where(self.model.id == id, **values):
            return None
        entity = await self.get_by_id(id)
        await self.db.refresh(entity)
        return entity

    async def delete_where(self, *conditions) -> int:
        """Bulk delete every row matching ``conditions``; returns the row count."""
        result = await self.db.execute(delete(self.model).where(*conditions))
        await self.db.flush()
        return result.rowcount

    async def delete(self, id: UUID) -> bool:
        """Delete entity by ID; False if it didn't exist."""
        return await self.delete_where(self.model.id == id) > 0
