"""Expose schemas for easier import."""

from app.schemas.place import (  # noqa: F401
    FeatureOut,
    PhotoOut,
    PlaceCreate,
    PlaceDetailOut,
    PlaceListOut,
    PlaceStats,
    ReviewAuthorOut,
    ReviewOut,
)
from app.schemas.review import FavoriteResult, FeatureTagOut, ReviewCreate  # noqa: F401
