"""Album database model."""
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, Uuid
from sqlalchemy.orm import relationship

from photomarket.core.database import Base, utcnow

if TYPE_CHECKING:
    from .photo import Photo


class Album(Base):
    """Album model: a priced, publishable collection of photos."""

    __tablename__ = "albums"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Categories live in the external catalog service
    category_id = Column(Uuid, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(String(50), nullable=True)
    cover_image = Column(Text, nullable=True)
    price = Column(Integer, nullable=False)  # whole yen
    is_published = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    photos = relationship(
        "Photo",
        back_populates="album",
        cascade="all, delete-orphan",
        order_by="Photo.created_at"
    )

    def __repr__(self) -> str:
        return f"<Album(id={self.id}, name='{self.name}', published={self.is_published})>"
