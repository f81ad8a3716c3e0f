"""Order database model."""
import uuid

from sqlalchemy import Column, String, Integer, DateTime, JSON, Uuid

from photomarket.core.database import Base, utcnow

ORDER_STATUSES = ("pending", "completed", "failed")


class Order(Base):
    """Order model; only completed orders grant downloads."""

    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_email = Column(String(255), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)
    total_amount = Column(Integer, nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    # Line items: [{"type", "item_id", "name", "price", "thumbnail_url"}], never mutated
    items = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, customer='{self.customer_email}', status='{self.status}')>"
