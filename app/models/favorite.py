"""Favorite model."""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Favorite(Base):
    """User bookmark of a place, unique per (user, place)."""

    __tablename__ = "favorites"

    user_id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    place_id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        ForeignKey("places.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User", back_populates="favorites")
    place = relationship("Place", back_populates="favorites")
