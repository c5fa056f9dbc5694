"""User model (owned by the credential service, read here)."""

from sqlalchemy import BigInteger, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class User(Base):
    """Account referenced by places, reviews and favorites."""

    __tablename__ = "users"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(120))
    surname = Column(String(120))
    password_hash = Column(String(255))  # never projected
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    places = relationship("Place", back_populates="owner")
    reviews = relationship("Review", back_populates="user")
    favorites = relationship("Favorite", back_populates="user")
