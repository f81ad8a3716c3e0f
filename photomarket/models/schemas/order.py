"""Order Pydantic schemas."""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from uuid import UUID

ItemType = Literal["photo", "album"]


class OrderItem(BaseModel):
    """One purchased photo or album."""

    type: ItemType
    item_id: UUID
    name: str = Field(..., min_length=1)
    price: int = Field(..., ge=0)
    thumbnail_url: str = ""


class OrderCreate(BaseModel):
    """Schema for recording an order after checkout."""

    items: List[OrderItem] = Field(..., min_length=1)
    total_amount: int = Field(..., ge=0, description="Total in yen")
    customer_name: Optional[str] = Field(default=None, description="Display name, email when omitted")


class OrderStatusUpdate(BaseModel):
    """Payment confirmation or failure reported by the back office."""

    status: Literal["pending", "completed", "failed"]


class OrderResponse(BaseModel):
    """Schema for order responses."""

    id: UUID
    customer_email: str
    customer_name: str
    total_amount: int
    status: str
    items: List[OrderItem]
    created_at: datetime

    class Config:
        from_attributes = True
