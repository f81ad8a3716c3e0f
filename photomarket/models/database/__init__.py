"""SQLAlchemy ORM models."""
from .album import Album
from .photo import Photo
from .order import Order, ORDER_STATUSES

__all__ = [
    "Album",
    "Photo",
    "Order",
    "ORDER_STATUSES",
]
