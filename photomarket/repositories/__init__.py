"""Data access layer - repositories."""
from .base import BaseRepository
from .album_repository import AlbumRepository
from .photo_repository import PhotoRepository
from .order_repository import OrderRepository

__all__ = [
    "BaseRepository",
    "AlbumRepository",
    "PhotoRepository",
    "OrderRepository",
]
