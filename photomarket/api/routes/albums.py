"""Album API routes."""
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from photomarket.api.dependencies import (
    get_album_service,
    get_cover_service,
    get_optional_current_user,
    is_admin,
    require_admin,
)
from photomarket.core.exceptions import CoverGenerationException
from photomarket.core.security import TokenPayload
from photomarket.models.database import Album
from photomarket.models.schemas import (
    AlbumCoverUpdate,
    AlbumCreate,
    AlbumResponse,
    AlbumUpdate,
    BulkPublishRequest,
    CountResponse,
    CoverGenerationResponse,
    MessageResponse,
    PhotoPriceUpdate,
    PhotoResponse,
)
from photomarket.services import AlbumService, CoverService

router = APIRouter()


def _album_response(album: Album, photo_count: Optional[int] = None) -> AlbumResponse:
    response = AlbumResponse.model_validate(album)
    return response.model_copy(update={"photo_count": photo_count})


@router.get("/categories/{category_id}/albums", response_model=List[AlbumResponse])
async def list_category_albums(
    category_id: UUID,
    skip: int = Query(default=0, ge=0, description="Number of records to skip"),
    limit: int = Query(default=100, ge=1, le=1000, description="Max records to return"),
    user: Optional[TokenPayload] = Depends(get_optional_current_user),
    album_service: AlbumService = Depends(get_album_service)
):
    """
    List albums of a category with their photo counts.

    Unpublished albums are only listed for administrators.
    """
    albums = await album_service.list_category_albums(
        category_id,
        include_unpublished=is_admin(user),
        skip=skip,
        limit=limit
    )
    return [_album_response(album, count) for album, count in albums]


@router.get("/albums/{album_id}", response_model=AlbumResponse)
async def get_album(
    album_id: UUID,
    user: Optional[TokenPayload] = Depends(get_optional_current_user),
    album_service: AlbumService = Depends(get_album_service)
):
    """Get album by ID."""
    album = await album_service.get_album(album_id, include_unpublished=is_admin(user))
    photo_count = await album_service.count_photos(album_id)
    return _album_response(album, photo_count)


@router.get("/albums/{album_id}/photos", response_model=List[PhotoResponse])
async def list_album_photos(
    album_id: UUID,
    skip: int = Query(default=0, ge=0, description="Number of records to skip"),
    limit: Optional[int] = Query(default=None, ge=1, le=5000, description="Max records to return"),
    user: Optional[TokenPayload] = Depends(get_optional_current_user),
    album_service: AlbumService = Depends(get_album_service)
):
    """List photos of an album in upload order."""
    photos = await album_service.list_album_photos(
        album_id,
        include_unpublished=is_admin(user),
        skip=skip,
        limit=limit
    )
    return [PhotoResponse.from_photo(photo) for photo in photos]


@router.post("/albums", response_model=AlbumResponse, status_code=201)
async def create_album(
    album_data: AlbumCreate,
    admin: TokenPayload = Depends(require_admin),
    album_service: AlbumService = Depends(get_album_service)
):
    """Create a new album (admin)."""
    album = await album_service.create_album(album_data)
    return _album_response(album, 0)


@router.post("/albums/bulk-publish", response_model=CountResponse)
async def bulk_publish_albums(
    request: BulkPublishRequest,
    admin: TokenPayload = Depends(require_admin),
    album_service: AlbumService = Depends(get_album_service)
):
    """Publish or unpublish several albums at once (admin)."""
    updated = await album_service.bulk_publish(request.album_ids, request.is_published)
    action = "published" if request.is_published else "unpublished"
    return CountResponse(message=f"{updated} albums {action}", updated_count=updated)


@router.patch("/albums/{album_id}", response_model=AlbumResponse)
async def update_album(
    album_id: UUID,
    album_data: AlbumUpdate,
    admin: TokenPayload = Depends(require_admin),
    album_service: AlbumService = Depends(get_album_service)
):
    """Update album name, description, date, price or publish flag (admin)."""
    album = await album_service.update_album(album_id, album_data.model_dump(exclude_unset=True))
    photo_count = await album_service.count_photos(album_id)
    return _album_response(album, photo_count)


@router.delete("/albums/{album_id}", response_model=MessageResponse)
async def delete_album(
    album_id: UUID,
    admin: TokenPayload = Depends(require_admin),
    album_service: AlbumService = Depends(get_album_service)
):
    """Delete an album with all of its photos and files (admin)."""
    await album_service.delete_album(album_id)
    return MessageResponse(message=f"Album {album_id} deleted")


@router.patch("/albums/{album_id}/cover", response_model=AlbumResponse)
async def update_album_cover(
    album_id: UUID,
    request: AlbumCoverUpdate,
    admin: TokenPayload = Depends(require_admin),
    album_service: AlbumService = Depends(get_album_service)
):
    """Override the album cover with an existing image URL (admin)."""
    album = await album_service.set_cover(album_id, request.cover_image)
    photo_count = await album_service.count_photos(album_id)
    return _album_response(album, photo_count)


@router.post("/albums/{album_id}/generate-cover", response_model=CoverGenerationResponse)
async def generate_album_cover(
    album_id: UUID,
    admin: TokenPayload = Depends(require_admin),
    cover_service: CoverService = Depends(get_cover_service),
    album_service: AlbumService = Depends(get_album_service)
):
    """
    Regenerate the album cover from its first photo (admin).

    Runs immediately, regardless of whether a cover was requested before.
    """
    album = await cover_service.select_and_generate_cover(album_id)
    if album is None:
        raise CoverGenerationException("album has no photos")

    photo_count = await album_service.count_photos(album_id)
    return CoverGenerationResponse(
        message="Album cover generated",
        album=_album_response(album, photo_count)
    )


@router.patch("/albums/{album_id}/photos/price", response_model=CountResponse)
async def update_photo_prices(
    album_id: UUID,
    request: PhotoPriceUpdate,
    admin: TokenPayload = Depends(require_admin),
    album_service: AlbumService = Depends(get_album_service)
):
    """Set the price of some or all photos of an album (admin)."""
    updated = await album_service.update_photo_prices(album_id, request.price, request.photo_ids)
    return CountResponse(message=f"{updated} photo prices updated", updated_count=updated)
