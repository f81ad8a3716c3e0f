"""Purchase-based access decisions."""
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.core.exceptions import AccessDeniedException
from photomarket.repositories import OrderRepository

logger = logging.getLogger(__name__)

COMPLETED = "completed"


class AccessService:
    """
    Decides whether a user owns a photo or album.

    Ownership is read from the orders table on every call; pending and
    failed orders never grant anything.
    """

    def __init__(self, db: AsyncSession):
        self.order_repo = OrderRepository(db)

    async def has_access(self, user_email: str, item_type: str, item_id: UUID) -> bool:
        """
        Check whether any completed order of the user contains the item.

        Args:
            user_email: Purchaser identity
            item_type: "photo" or "album"
            item_id: Item UUID

        Returns:
            True if the item was purchased
        """
        orders = await self.order_repo.get_for_user(user_email, status=COMPLETED)
        wanted = str(item_id)
        for order in orders:
            for item in order.items or []:
                if item.get("type") == item_type and str(item.get("item_id")) == wanted:
                    return True
        return False

    async def require_access(self, user_email: str, item_type: str, item_id: UUID):
        """
        Raises:
            AccessDeniedException: If the user never completed a purchase of the item
        """
        if not await self.has_access(user_email, item_type, item_id):
            logger.info("Denied %s %s to %s", item_type, item_id, user_email)
            raise AccessDeniedException(item_type, str(item_id))
