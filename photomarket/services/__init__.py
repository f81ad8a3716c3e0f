"""Business logic services."""
from .storage_service import StorageService
from .worker_pool import ImageWorkerPool
from .cover_guard import (
    CoverRequestGuard,
    InMemoryCoverGuard,
    RedisCoverGuard,
    create_cover_guard,
)
from .cover_service import CoverService
from .cover_queue import CoverTaskQueue
from .ingestion_service import IngestionService, IncomingPhoto, validate_upload
from .access_service import AccessService
from .archive_writer import ZipStreamWriter
from .export_service import ExportService, ExportPayload
from .album_service import AlbumService
from .order_service import OrderService

__all__ = [
    "StorageService",
    "ImageWorkerPool",
    "CoverRequestGuard",
    "InMemoryCoverGuard",
    "RedisCoverGuard",
    "create_cover_guard",
    "CoverService",
    "CoverTaskQueue",
    "IngestionService",
    "IncomingPhoto",
    "validate_upload",
    "AccessService",
    "ZipStreamWriter",
    "ExportService",
    "ExportPayload",
    "AlbumService",
    "OrderService",
]
