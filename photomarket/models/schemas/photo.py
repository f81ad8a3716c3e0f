"""Photo Pydantic schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from uuid import UUID


class PublicPhotoMetadata(BaseModel):
    """Photo metadata safe to show to any visitor."""

    date_taken: Optional[str] = Field(default=None, description="ISO-8601 capture date")
    description: str = Field(default="", description="Free text description")


class PhotoMetadata(PublicPhotoMetadata):
    """
    Metadata stored with a photo.

    ``file_path`` is the absolute path of the original on the ingesting host;
    it is used to regenerate covers and never leaves the server.
    """

    file_path: Optional[str] = Field(default=None, description="Internal original path")

    def to_public(self) -> PublicPhotoMetadata:
        return PublicPhotoMetadata(date_taken=self.date_taken, description=self.description)


class PhotoResponse(BaseModel):
    """Schema for photo responses."""

    id: UUID
    album_id: UUID
    filename: str
    thumbnail_url: str
    watermarked_url: str
    price: int
    metadata: PublicPhotoMetadata
    created_at: datetime

    @classmethod
    def from_photo(cls, photo) -> "PhotoResponse":
        metadata = PhotoMetadata.model_validate(photo.extra_metadata or {})
        return cls(
            id=photo.id,
            album_id=photo.album_id,
            filename=photo.filename,
            thumbnail_url=photo.thumbnail_url,
            watermarked_url=photo.watermarked_url,
            price=photo.price,
            metadata=metadata.to_public(),
            created_at=photo.created_at,
        )


class PhotoPriceUpdate(BaseModel):
    """Bulk price change for photos of one album."""

    price: int = Field(..., ge=0, description="New price in yen")
    photo_ids: Optional[List[UUID]] = Field(
        default=None,
        description="Photos to update; all photos of the album when omitted"
    )
