"""Expose API endpoint routers."""

from app.api.endpoints import favorites, features, places, reviews

__all__ = ["favorites", "features", "places", "reviews"]
