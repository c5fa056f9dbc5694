"""Accessibility feature tag models."""

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base


class FeatureTag(Base):
    """Named accessibility attribute, created lazily on first use."""

    __tablename__ = "features"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(64), nullable=False, unique=True, index=True)  # lowercase slug
    label = Column(String(255), nullable=False)

    places = relationship("PlaceFeature", back_populates="feature")

    def __repr__(self) -> str:
        return f"<FeatureTag(key='{self.key}')>"


class PlaceFeature(Base):
    """Place x FeatureTag join; existence means the place has the attribute."""

    __tablename__ = "place_features"
    __table_args__ = (
        UniqueConstraint("place_id", "feature_id", name="uq_place_feature"),
    )

    id = Column(Integer, primary_key=True, index=True)
    place_id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        ForeignKey("places.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    feature_id = Column(Integer, ForeignKey("features.id", ondelete="CASCADE"), nullable=False, index=True)

    place = relationship("Place", back_populates="features")
    feature = relationship("FeatureTag", back_populates="places")
