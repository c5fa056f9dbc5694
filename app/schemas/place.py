"""Pydantic schemas for places."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; both accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class FeatureOut(CamelModel):
    key: str
    label: str


class PhotoOut(CamelModel):
    id: int
    url: str


class PlaceStats(CamelModel):
    review_count: int = 0
    favorite_count: int = 0
    average_rating: Optional[float] = None


class PlaceCreate(CamelModel):
    """Place submission.

    Fields accept any JSON type; the service normalizes them so every rejection
    carries a reason code (a non-string name counts as missing, non-list photos
    as no photos).
    """

    name: Any = None
    category: Any = None
    description: Any = None
    address: Any = Field(None, description="Freeform display line; overrides the composed one")
    postal_code: Any = None
    street: Any = None
    number: Any = None
    complement: Any = None
    neighborhood: Any = None
    city: Any = None
    region: Any = Field(None, description="Two-letter state code")
    phone: Any = None
    website: Any = None
    latitude: Any = None
    longitude: Any = None
    features: Any = Field(None, description="List of keys or a comma-separated string")
    photos: Any = Field(None, description="List of data:<mime>;base64,<data> strings or objects")


class PlaceListOut(CamelModel):
    id: int
    name: str
    category: str
    address: Optional[str] = None
    postal_code: Optional[str] = None
    formatted_postal_code: Optional[str] = None
    street: Optional[str] = None
    number: Optional[str] = None
    complement: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    accessibility_flags: Optional[dict[str, bool]] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None
    features: list[FeatureOut] = Field(default_factory=list)
    photos: list[PhotoOut] = Field(default_factory=list)
    stats: PlaceStats = Field(default_factory=PlaceStats)
    is_favorite: bool = False


class ReviewAuthorOut(CamelModel):
    id: int
    name: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None


class ReviewOut(CamelModel):
    id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    user: Optional[ReviewAuthorOut] = None


class PlaceDetailOut(PlaceListOut):
    reviews: list[ReviewOut] = Field(default_factory=list)
