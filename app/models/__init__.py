"""Database models."""

from app.models.user import User
from app.models.place import Place
from app.models.feature import FeatureTag, PlaceFeature
from app.models.photo import Photo
from app.models.review import Review
from app.models.favorite import Favorite

__all__ = [
    "User",
    "Place",
    "FeatureTag",
    "PlaceFeature",
    "Photo",
    "Review",
    "Favorite",
]
