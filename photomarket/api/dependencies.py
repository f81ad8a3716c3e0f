"""Dependency injection for FastAPI routes."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.core.database import get_db
from photomarket.core.security import TokenPayload, decode_access_token
from photomarket.services import (
    AccessService,
    AlbumService,
    CoverRequestGuard,
    CoverService,
    CoverTaskQueue,
    ExportService,
    ImageWorkerPool,
    IngestionService,
    OrderService,
    StorageService,
    create_cover_guard,
)

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


# Singleton service instances
_storage_service: StorageService | None = None
_worker_pool: ImageWorkerPool | None = None
_cover_guard: CoverRequestGuard | None = None
_cover_queue: CoverTaskQueue | None = None


def get_storage_service() -> StorageService:
    """Get storage service (singleton)."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service


def get_worker_pool() -> ImageWorkerPool:
    """Get image worker pool (singleton)."""
    global _worker_pool
    if _worker_pool is None:
        _worker_pool = ImageWorkerPool()
    return _worker_pool


def get_cover_guard() -> CoverRequestGuard:
    """Get cover request guard (singleton)."""
    global _cover_guard
    if _cover_guard is None:
        _cover_guard = create_cover_guard()
    return _cover_guard


def get_cover_queue() -> CoverTaskQueue:
    """Get cover task queue (singleton)."""
    global _cover_queue
    if _cover_queue is None:
        _cover_queue = CoverTaskQueue(
            guard=get_cover_guard(),
            storage=get_storage_service(),
            pool=get_worker_pool(),
        )
    return _cover_queue


# Request-scoped services (get fresh instances with DB session)


async def get_album_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
) -> AlbumService:
    """Get album service."""
    return AlbumService(db, storage)


async def get_ingestion_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    pool: ImageWorkerPool = Depends(get_worker_pool),
    cover_queue: CoverTaskQueue = Depends(get_cover_queue),
) -> IngestionService:
    """Get ingestion service."""
    return IngestionService(db, storage, pool, cover_queue)


async def get_cover_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    pool: ImageWorkerPool = Depends(get_worker_pool),
) -> CoverService:
    """Get cover service."""
    return CoverService(db, storage, pool)


async def get_access_service(
    db: AsyncSession = Depends(get_db),
) -> AccessService:
    """Get access service."""
    return AccessService(db)


async def get_export_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    access: AccessService = Depends(get_access_service),
) -> ExportService:
    """Get export service."""
    return ExportService(db, storage, access)


async def get_order_service(
    db: AsyncSession = Depends(get_db),
) -> OrderService:
    """Get order service."""
    return OrderService(db)


# Authentication


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenPayload:
    """
    Dependency to get the current authenticated user.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not credentials:
        raise credentials_exception

    user = decode_access_token(credentials.credentials)
    if user is None:
        logger.warning("Rejected invalid or expired bearer token")
        raise credentials_exception

    return user


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[TokenPayload]:
    """
    Dependency to optionally get the current user.
    Returns None if no valid token is provided.
    """
    if not credentials:
        return None
    return decode_access_token(credentials.credentials)


async def require_admin(
    user: TokenPayload = Depends(get_current_user),
) -> TokenPayload:
    """
    Dependency restricting a route to administrators.

    Raises:
        HTTPException: 403 for authenticated non-admins
    """
    if not user.is_admin:
        logger.warning("Non-admin %s tried an admin endpoint", user.email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator privileges required",
        )
    return user


def is_admin(user: Optional[TokenPayload]) -> bool:
    return bool(user and user.is_admin)
