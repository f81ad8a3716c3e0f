"""Order repository."""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.models.database import Order
from photomarket.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """Repository for order operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(Order, db)

    async def get_for_user(
        self,
        customer_email: str,
        status: Optional[str] = None
    ) -> List[Order]:
        """
        Get all orders of a purchaser, newest first.

        Args:
            customer_email: Purchaser identity
            status: Only orders with this status when given

        Returns:
            List of orders
        """
        query = select(Order).where(Order.customer_email == customer_email)
        if status is not None:
            query = query.where(Order.status == status)

        result = await self.db.execute(query.order_by(Order.created_at.desc()))
        return list(result.scalars().all())
