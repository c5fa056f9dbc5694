"""Project places and their relations into list / detail view models."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence, Union

from sqlalchemy import inspect as sa_inspect

from app.models.feature import FeatureTag
from app.models.photo import Photo
from app.models.place import Place
from app.models.review import Review
from app.schemas.place import (
    FeatureOut,
    PhotoOut,
    PlaceDetailOut,
    PlaceListOut,
    PlaceStats,
    ReviewAuthorOut,
    ReviewOut,
)
from app.services.address import format_postal_code
from app.services.features import CANONICAL_FEATURE_KEYS, label_for


@dataclass(frozen=True)
class RelationalFeatures:
    """Feature rows loaded through the place_features join."""

    tags: Sequence[FeatureTag]


@dataclass(frozen=True)
class FlagFeatures:
    """Denormalized flag map, used when the features join was not loaded.

    Only canonical keys appear in the map, so custom tags are not listed.
    """

    flags: dict[str, bool]


FeatureSource = Union[RelationalFeatures, FlagFeatures]


@dataclass
class PlaceAggregate:
    """A place plus whatever relations the query shape loaded."""

    place: Place
    features: FeatureSource
    photos: Sequence[Photo] = ()
    reviews: Sequence[Review] = ()
    ratings: Optional[Sequence[int]] = None  # rating-only load; falls back to reviews
    review_count: Optional[int] = None
    favorite_count: Optional[int] = None
    favorite_user_ids: Sequence[int] = field(default_factory=tuple)

    @classmethod
    def from_place(cls, place: Place, **extra) -> "PlaceAggregate":
        """Aggregate built from the place's ORM relationships.

        Query shapes that skip the features join get the flag map instead, so
        projecting never triggers a lazy load of the join rows.
        """
        if "features" not in extra:
            if "features" in sa_inspect(place).unloaded:
                extra["features"] = FlagFeatures(dict(place.accessibility_flags or {}))
            else:
                extra["features"] = RelationalFeatures(
                    [pf.feature for pf in place.features if pf.feature is not None]
                )
        return cls(place=place, photos=list(place.photos), **extra)


def average_rating(ratings: Iterable[Union[int, float]]) -> float | None:
    """Arithmetic mean rounded half away from zero to 2 decimals; None when empty."""
    values = [Decimal(str(r)) for r in ratings]
    if not values:
        return None
    mean = sum(values) / len(values)
    return float(mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def project_features(source: FeatureSource) -> list[FeatureOut]:
    if isinstance(source, RelationalFeatures):
        return [FeatureOut(key=tag.key, label=tag.label) for tag in source.tags]
    flags = source.flags or {}
    ordered = [k for k in CANONICAL_FEATURE_KEYS if flags.get(k)]
    ordered += sorted(k for k, v in flags.items() if v and k not in CANONICAL_FEATURE_KEYS)
    return [FeatureOut(key=key, label=label_for(key)) for key in ordered]


def _ratings(aggregate: PlaceAggregate) -> list[int]:
    if aggregate.ratings is not None:
        return list(aggregate.ratings)
    return [review.rating for review in aggregate.reviews]


def is_favorite(aggregate: PlaceAggregate, viewer_user_id: Optional[int]) -> bool:
    if viewer_user_id is None:
        return False
    return viewer_user_id in set(aggregate.favorite_user_ids)


def to_list_view(aggregate: PlaceAggregate, viewer_user_id: Optional[int]) -> PlaceListOut:
    place = aggregate.place
    ratings = _ratings(aggregate)
    review_count = aggregate.review_count if aggregate.review_count is not None else len(ratings)
    return PlaceListOut(
        id=place.id,
        name=place.name,
        category=place.category,
        address=place.address,
        postal_code=place.postal_code,
        formatted_postal_code=format_postal_code(place.postal_code) if place.postal_code else None,
        street=place.street,
        number=place.number,
        complement=place.complement,
        neighborhood=place.neighborhood,
        city=place.city,
        region=place.region,
        accessibility_flags=place.accessibility_flags or None,
        phone=place.phone,
        website=place.website,
        description=place.description,
        latitude=place.latitude,
        longitude=place.longitude,
        created_at=place.created_at,
        features=project_features(aggregate.features),
        photos=[PhotoOut(id=photo.id, url=photo.url) for photo in aggregate.photos],
        stats=PlaceStats(
            review_count=review_count,
            favorite_count=aggregate.favorite_count or 0,
            average_rating=average_rating(ratings),
        ),
        is_favorite=is_favorite(aggregate, viewer_user_id),
    )


def project_review(review: Review) -> ReviewOut:
    author = review.user
    return ReviewOut(
        id=review.id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        user=ReviewAuthorOut(
            id=author.id, name=author.name, surname=author.surname, email=author.email
        ) if author is not None else None,
    )


def to_detail_view(aggregate: PlaceAggregate, viewer_user_id: Optional[int]) -> PlaceDetailOut:
    base = to_list_view(aggregate, viewer_user_id)
    reviews = sorted(aggregate.reviews, key=lambda r: (r.created_at, r.id), reverse=True)
    return PlaceDetailOut(
        **base.model_dump(),
        reviews=[project_review(review) for review in reviews],
    )
