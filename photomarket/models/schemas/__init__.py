"""Pydantic schemas for API validation."""
from __future__ import annotations

from .common import MessageResponse, CountResponse
from .album import (
    AlbumBase,
    AlbumCreate,
    AlbumUpdate,
    AlbumResponse,
    AlbumCoverUpdate,
    BulkPublishRequest,
    CoverGenerationResponse,
)
from .photo import (
    PublicPhotoMetadata,
    PhotoMetadata,
    PhotoResponse,
    PhotoPriceUpdate,
)
from .order import (
    ItemType,
    OrderItem,
    OrderCreate,
    OrderStatusUpdate,
    OrderResponse,
)

__all__ = [
    # Common
    "MessageResponse",
    "CountResponse",
    # Album
    "AlbumBase",
    "AlbumCreate",
    "AlbumUpdate",
    "AlbumResponse",
    "AlbumCoverUpdate",
    "BulkPublishRequest",
    "CoverGenerationResponse",
    # Photo
    "PublicPhotoMetadata",
    "PhotoMetadata",
    "PhotoResponse",
    "PhotoPriceUpdate",
    # Order
    "ItemType",
    "OrderItem",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderResponse",
]
