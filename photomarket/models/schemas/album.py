"""Album Pydantic schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from uuid import UUID


class AlbumBase(BaseModel):
    """Base album schema with common fields."""

    category_id: UUID = Field(..., description="Owning category")
    name: str = Field(..., min_length=1, max_length=255, description="Album name")
    description: Optional[str] = Field(default=None, description="Album description")
    date: Optional[str] = Field(default=None, max_length=50, description="Shooting date or range")
    price: int = Field(..., ge=0, description="Whole-album price in yen")


class AlbumCreate(AlbumBase):
    """Schema for creating a new album."""

    is_published: bool = False


class AlbumUpdate(BaseModel):
    """Schema for updating an album."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    date: Optional[str] = Field(default=None, max_length=50)
    price: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None


class AlbumResponse(AlbumBase):
    """Schema for album responses."""

    id: UUID
    cover_image: Optional[str] = None
    is_published: bool
    created_at: datetime
    photo_count: Optional[int] = Field(default=None, description="Number of photos in album")

    class Config:
        from_attributes = True


class AlbumCoverUpdate(BaseModel):
    """Manual cover override."""

    cover_image: str = Field(..., min_length=1, description="URL of the new cover image")


class BulkPublishRequest(BaseModel):
    """Publish or unpublish several albums at once."""

    album_ids: List[UUID] = Field(..., min_length=1)
    is_published: bool


class CoverGenerationResponse(BaseModel):
    """Result of a manual cover regeneration."""

    message: str
    album: AlbumResponse
