"""Place photo model."""

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class Photo(Base):
    """Stored photo reference; ordered by insertion."""

    __tablename__ = "photos"

    id = Column(Integer, primary_key=True, index=True)
    place_id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        ForeignKey("places.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url = Column(String(500), nullable=False)  # /uploads/places/<filename>

    place = relationship("Place", back_populates="photos")
