"""Multi-criteria place search."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.feature import FeatureTag, PlaceFeature
from app.models.place import Place
from app.schemas.place import PlaceListOut
from app.services.address import POSTAL_CODE_LENGTH, clean_text, digits_only, postal_code_digits
from app.services.features import parse_feature_keys
from app.services.places import with_list_relations, load_list_aggregates
from app.services.projector import to_list_view

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50

# criterion attribute -> column, all case-insensitive substring matches
SUBSTRING_FILTERS = {
    "neighborhood": Place.neighborhood,
    "city": Place.city,
    "street": Place.street,
    "number": Place.number,
    "complement": Place.complement,
}
TEXT_SEARCH_COLUMNS = (
    Place.name,
    Place.address,
    Place.description,
    Place.street,
    Place.neighborhood,
    Place.city,
    Place.region,
)


def normalize_limit(raw: Any, maximum: int | None = None) -> int:
    """Malformed or non-positive limits fall back to the default; others are clamped."""
    maximum = maximum or settings.search_max_limit
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return min(DEFAULT_LIMIT, maximum)
    if not math.isfinite(value) or value <= 0:
        return min(DEFAULT_LIMIT, maximum)
    return min(max(int(value), 1), maximum)


@dataclass
class SearchCriteria:
    term: Optional[str] = None
    category: Optional[str] = None
    feature_keys: list[str] = field(default_factory=list)
    postal_code: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    street: Optional[str] = None
    number: Optional[str] = None
    complement: Optional[str] = None
    region: Optional[str] = None
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_params(
        cls,
        search: Any = None,
        category: Any = None,
        features: str | Iterable[str] | None = None,
        postal_code: Any = None,
        neighborhood: Any = None,
        city: Any = None,
        street: Any = None,
        number: Any = None,
        complement: Any = None,
        region: Any = None,
        limit: Any = None,
    ) -> "SearchCriteria":
        """Normalize raw query parameters; blank values are dropped."""
        region_value = clean_text(region).upper()
        return cls(
            term=clean_text(search) or None,
            category=clean_text(category) or None,
            feature_keys=parse_feature_keys(features),
            postal_code=postal_code_digits(postal_code) or None,
            neighborhood=clean_text(neighborhood) or None,
            city=clean_text(city) or None,
            street=clean_text(street) or None,
            number=clean_text(number) or None,
            complement=clean_text(complement) or None,
            region=region_value or None,
            limit=normalize_limit(limit),
        )


def build_search_statement(criteria: SearchCriteria) -> Select:
    """AND of every provided criterion, newest first."""
    filters = []

    if criteria.term:
        term_filters = [column.icontains(criteria.term, autoescape=True) for column in TEXT_SEARCH_COLUMNS]
        term_digits = digits_only(criteria.term)
        if len(term_digits) == POSTAL_CODE_LENGTH:
            term_filters.append(Place.postal_code.contains(term_digits, autoescape=True))
        filters.append(or_(*term_filters))

    if criteria.category:
        filters.append(Place.category == criteria.category)

    if criteria.feature_keys:
        tagged = (
            select(PlaceFeature.place_id)
            .join(FeatureTag, FeatureTag.id == PlaceFeature.feature_id)
            .where(FeatureTag.key.in_(criteria.feature_keys))
        )
        filters.append(Place.id.in_(tagged))

    if criteria.postal_code:
        filters.append(Place.postal_code.contains(criteria.postal_code, autoescape=True))

    for name, column in SUBSTRING_FILTERS.items():
        value = getattr(criteria, name)
        if value:
            filters.append(column.icontains(value, autoescape=True))

    if criteria.region:
        filters.append(Place.region == criteria.region)

    stmt = select(Place)
    if filters:
        stmt = stmt.where(and_(*filters))
    return stmt.order_by(Place.created_at.desc(), Place.id.desc()).limit(criteria.limit)


def search_places(
    db: Session,
    criteria: SearchCriteria,
    viewer_user_id: Optional[int] = None,
) -> list[PlaceListOut]:
    """Run the search and project every hit as a list view."""
    stmt = with_list_relations(build_search_statement(criteria))
    places = db.execute(stmt).scalars().unique().all()
    logger.debug("Search %s matched %d place(s)", criteria, len(places))
    return [to_list_view(aggregate, viewer_user_id) for aggregate in load_list_aggregates(db, places, viewer_user_id)]
