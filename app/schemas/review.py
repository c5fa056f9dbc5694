"""Schemas for reviews, favorites and feature listings."""

from typing import Any

from pydantic import Field

from app.schemas.place import CamelModel


class ReviewCreate(CamelModel):
    rating: Any = Field(None, description="1 to 5; fractional values are truncated")
    comment: Any = None


class FavoriteResult(CamelModel):
    ok: bool = True


class FeatureTagOut(CamelModel):
    id: int
    key: str
    label: str
