"""API routes."""
from fastapi import APIRouter

from photomarket.core.config import settings

from . import health, albums, photos, downloads, orders

# Create API router
api_router = APIRouter(prefix=f"/api/{settings.api_version}")

# Include all route modules
api_router.include_router(health.router, tags=["health"])
api_router.include_router(albums.router, tags=["albums"])
api_router.include_router(photos.router, tags=["photos"])
api_router.include_router(downloads.router, tags=["downloads"])
api_router.include_router(orders.router, tags=["orders"])

__all__ = ["api_router"]
