"""Place model."""

from sqlalchemy import JSON, BigInteger, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Place(Base):
    """Directory entry for a physical location."""

    __tablename__ = "places"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    address = Column(Text, nullable=False)  # composed display line

    postal_code = Column(String(8), index=True)  # digits only
    street = Column(String(255))
    number = Column(String(30))
    complement = Column(String(255))
    neighborhood = Column(String(120))
    city = Column(String(120), index=True)
    region = Column(String(2), index=True)  # two-letter state code, uppercase

    phone = Column(String(50))
    website = Column(String(500))
    latitude = Column(Float)
    longitude = Column(Float)

    # canonical feature key -> bool, denormalized copy of the features relation
    accessibility_flags = Column(JSON, nullable=False, default=dict)

    owner_id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    owner = relationship("User", back_populates="places")
    features = relationship(
        "PlaceFeature",
        back_populates="place",
        cascade="all, delete-orphan",
        order_by="PlaceFeature.id",
    )
    photos = relationship(
        "Photo",
        back_populates="place",
        cascade="all, delete-orphan",
        order_by="Photo.id",
    )
    reviews = relationship("Review", back_populates="place", passive_deletes=True)
    favorites = relationship("Favorite", back_populates="place", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Place(id={self.id}, name='{self.name}', city='{self.city}')>"
