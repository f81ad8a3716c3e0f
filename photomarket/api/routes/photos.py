"""Photo API routes."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile

from photomarket.api.dependencies import (
    get_album_service,
    get_ingestion_service,
    get_optional_current_user,
    is_admin,
    require_admin,
)
from photomarket.core.security import TokenPayload
from photomarket.models.schemas import MessageResponse, PhotoResponse
from photomarket.services import AlbumService, IncomingPhoto, IngestionService

router = APIRouter()


@router.post("/albums/{album_id}/photos/upload", response_model=PhotoResponse, status_code=201)
async def upload_photo(
    album_id: UUID,
    photo: Optional[UploadFile] = File(default=None, description="Image file"),
    price: Optional[int] = Form(default=None, ge=0, description="Unit price in yen"),
    date_taken: Optional[str] = Form(default=None, description="ISO-8601 capture date"),
    description: Optional[str] = Form(default=None, description="Photo description"),
    admin: TokenPayload = Depends(require_admin),
    ingestion_service: IngestionService = Depends(get_ingestion_service)
):
    """
    Upload a photo into an album (admin).

    **Parameters:**
    - **photo**: Image file, at most 500 MB, any ``image/*`` type
    - **price**: Unit price, 1200 yen when omitted
    - **date_taken**: Capture date, upload time when omitted
    - **description**: Free text

    **Returns:** The created photo with thumbnail and watermarked URLs.
    The album cover is generated in the background after the first upload.
    """
    upload = None
    if photo is not None:
        upload = IncomingPhoto(
            filename=photo.filename or "",
            content_type=photo.content_type,
            stream=photo.file,
            size=photo.size,
        )

    created = await ingestion_service.ingest(
        album_id,
        upload,
        price=price,
        date_taken=date_taken,
        description=description
    )
    return PhotoResponse.from_photo(created)


@router.get("/photos/{photo_id}", response_model=PhotoResponse)
async def get_photo(
    photo_id: UUID,
    user: Optional[TokenPayload] = Depends(get_optional_current_user),
    album_service: AlbumService = Depends(get_album_service)
):
    """Get photo by ID."""
    photo = await album_service.get_photo(photo_id, include_unpublished=is_admin(user))
    return PhotoResponse.from_photo(photo)


@router.delete("/photos/{photo_id}", response_model=MessageResponse)
async def delete_photo(
    photo_id: UUID,
    admin: TokenPayload = Depends(require_admin),
    album_service: AlbumService = Depends(get_album_service)
):
    """Delete a photo with its original and derivatives (admin)."""
    await album_service.delete_photo(photo_id)
    return MessageResponse(message=f"Photo {photo_id} deleted")


@router.post("/photos/{photo_id}/regenerate", response_model=PhotoResponse)
async def regenerate_photo_derivatives(
    photo_id: UUID,
    admin: TokenPayload = Depends(require_admin),
    ingestion_service: IngestionService = Depends(get_ingestion_service)
):
    """Re-render thumbnail and watermarked copy from the original (admin)."""
    photo = await ingestion_service.regenerate_derivatives(photo_id)
    return PhotoResponse.from_photo(photo)
