"""Order recording and status changes."""
import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.core.exceptions import ValidationException
from photomarket.models.database import ORDER_STATUSES, Order
from photomarket.models.schemas import OrderCreate
from photomarket.repositories import OrderRepository

logger = logging.getLogger(__name__)


class OrderService:
    """
    Service for order operations.

    Payments are confirmed outside this service; it only records orders
    and applies the status the payment side reports.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = OrderRepository(db)

    async def create_order(self, customer_email: str, data: OrderCreate) -> Order:
        """
        Record a pending order for the caller.

        Args:
            customer_email: Authenticated purchaser
            data: Line items and total

        Returns:
            Created order
        """
        order = Order(
            customer_email=customer_email,
            customer_name=data.customer_name or customer_email,
            total_amount=data.total_amount,
            status="pending",
            items=[item.model_dump(mode="json") for item in data.items],
        )
        order = await self.repo.create(order)
        logger.info("Order %s recorded for %s (%d items)", order.id, customer_email, len(data.items))
        return order

    async def list_user_orders(self, customer_email: str) -> List[Order]:
        return await self.repo.get_for_user(customer_email)

    async def list_orders(self, skip: int = 0, limit: int = 100) -> List[Order]:
        return await self.repo.get_all(skip=skip, limit=limit)

    async def update_status(self, order_id: UUID, status: str) -> Order:
        """
        Apply a payment outcome to an order.

        Raises:
            ValidationException: Unknown status
            NotFoundException: If order not found
        """
        if status not in ORDER_STATUSES:
            raise ValidationException(f"Unknown order status '{status}'")

        order = await self.repo.get_by_id_or_fail(order_id)
        previous = order.status
        order = await self.repo.update(order_id, {"status": status})
        logger.info("Order %s status %s -> %s", order_id, previous, status)
        return order
