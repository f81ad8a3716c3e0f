"""Photo database model."""
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Column, String, Text, Integer, DateTime, JSON, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from photomarket.core.database import Base, utcnow

if TYPE_CHECKING:
    from .album import Album


class Photo(Base):
    """Photo model: one uploaded original and its derivative URLs."""

    __tablename__ = "photos"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    album_id = Column(
        Uuid,
        ForeignKey("albums.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    filename = Column(String(255), nullable=False)
    original_url = Column(Text, nullable=False)
    thumbnail_url = Column(Text, nullable=False)
    watermarked_url = Column(Text, nullable=False)
    price = Column(Integer, nullable=False)  # whole yen
    # date_taken, description and the internal original path (see PhotoMetadata)
    extra_metadata = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    # Relationships
    album = relationship("Album", back_populates="photos")

    def __repr__(self) -> str:
        return f"<Photo(id={self.id}, filename='{self.filename}')>"
