"""Place writes and relation-loading reads."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.errors import NotFoundError, StorageError, ValidationError
from app.models.favorite import Favorite
from app.models.feature import PlaceFeature
from app.models.photo import Photo
from app.models.place import Place
from app.models.review import Review
from app.schemas.place import PlaceCreate, PlaceDetailOut, PlaceListOut
from app.services import photos as photo_ingestion
from app.services.address import build_full_address, clean_text, normalize_postal_code, to_float
from app.services.features import build_accessibility_flags, parse_feature_keys, resolve_or_create, validate_feature_key
from app.services.projector import PlaceAggregate, RelationalFeatures, to_detail_view, to_list_view

logger = logging.getLogger(__name__)

REQUIRED_ADDRESS_FIELDS = ("postal_code", "street", "number", "neighborhood", "city", "region")


def _optional_text(value: Any) -> Optional[str]:
    return clean_text(value) or None


def build_place_fields(payload: PlaceCreate) -> dict[str, Any]:
    """Validate a submission and return column values (no feature/photo work)."""
    name = clean_text(payload.name)
    category = clean_text(payload.category)
    description = clean_text(payload.description)
    if not name or not category or not description:
        raise ValidationError("missing_fields", "Nome, tipo e descricao sao obrigatorios.")

    address = {
        "postal_code": normalize_postal_code(payload.postal_code),
        "street": clean_text(payload.street),
        "number": clean_text(payload.number),
        "neighborhood": clean_text(payload.neighborhood),
        "city": clean_text(payload.city),
        "region": clean_text(payload.region).upper(),
    }
    missing = [f for f in REQUIRED_ADDRESS_FIELDS if not address[f]]
    if missing:
        code = "invalid_postal_code" if missing == ["postal_code"] and clean_text(payload.postal_code) else "incomplete_address"
        raise ValidationError(code, "CEP, logradouro, numero, bairro, cidade e estado sao obrigatorios.")
    if len(address["region"]) != 2 or not address["region"].isalpha():
        raise ValidationError("invalid_region", "Informe a sigla do estado com 2 caracteres.")

    complement = _optional_text(payload.complement)
    display_address = clean_text(payload.address) or build_full_address(complement=complement, **address)

    latitude = to_float(payload.latitude)
    longitude = to_float(payload.longitude)
    if (latitude is None) != (longitude is None):
        raise ValidationError("invalid_coordinates", "Informe latitude e longitude juntas.")
    if latitude is not None and not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        raise ValidationError("invalid_coordinates", "Coordenadas fora do intervalo valido.")

    return {
        "name": name,
        "category": category,
        "description": description,
        "address": display_address,
        "complement": complement,
        "phone": _optional_text(payload.phone),
        "website": _optional_text(payload.website),
        "latitude": latitude,
        "longitude": longitude,
        **address,
    }


def create_place(
    db: Session,
    payload: PlaceCreate,
    storage: photo_ingestion.PhotoStorage,
    owner_id: Optional[int] = None,
) -> PlaceListOut:
    """Validate, ingest photos and insert the place with its relations atomically."""
    fields = build_place_fields(payload)
    feature_keys = [validate_feature_key(key) for key in parse_feature_keys(payload.features)]

    try:
        batch = photo_ingestion.ingest(payload.photos, storage)
    except OSError as exc:
        logger.exception("Photo staging failed")
        raise StorageError("could not stage photos") from exc

    try:
        tags = [resolve_or_create(db, key) for key in feature_keys]
        place = Place(
            **fields,
            accessibility_flags=build_accessibility_flags(feature_keys),
            owner_id=owner_id,
            features=[PlaceFeature(feature=tag) for tag in tags],
            photos=[Photo(url=url) for url in batch.urls],
        )
        db.add(place)
        db.flush()
        storage.promote(batch)
        db.commit()
    except (SQLAlchemyError, OSError) as exc:
        db.rollback()
        storage.discard(batch)
        logger.exception("Place creation failed; photo batch %s discarded", batch.batch_id)
        raise StorageError("could not save place") from exc
    except Exception:
        db.rollback()
        storage.discard(batch)
        raise

    db.refresh(place)
    logger.info("Created place %s (%s) with %d photo(s)", place.id, place.name, len(batch.filenames))
    aggregate = PlaceAggregate.from_place(
        place,
        features=RelationalFeatures(tags),
        reviews=[],
        review_count=0,
        favorite_count=0,
    )
    return to_list_view(aggregate, owner_id)


def with_list_relations(stmt):
    return stmt.options(
        selectinload(Place.features).joinedload(PlaceFeature.feature),
        selectinload(Place.photos),
    )


def load_list_aggregates(
    db: Session,
    places: Sequence[Place],
    viewer_user_id: Optional[int],
) -> list[PlaceAggregate]:
    """Batch-load ratings, counts and the viewer's favorites for a page of places."""
    ids = [place.id for place in places]
    if not ids:
        return []

    ratings: dict[int, list[int]] = {place_id: [] for place_id in ids}
    for place_id, rating in db.execute(
        select(Review.place_id, Review.rating).where(Review.place_id.in_(ids))
    ):
        ratings[place_id].append(rating)

    favorite_counts = dict(
        db.execute(
            select(Favorite.place_id, func.count())
            .where(Favorite.place_id.in_(ids))
            .group_by(Favorite.place_id)
        ).all()
    )

    viewer_favorites: set[int] = set()
    if viewer_user_id is not None:
        viewer_favorites = set(
            db.execute(
                select(Favorite.place_id).where(
                    Favorite.user_id == viewer_user_id, Favorite.place_id.in_(ids)
                )
            ).scalars()
        )

    return [
        PlaceAggregate.from_place(
            place,
            ratings=ratings[place.id],
            review_count=len(ratings[place.id]),
            favorite_count=favorite_counts.get(place.id, 0),
            favorite_user_ids=(viewer_user_id,) if place.id in viewer_favorites else (),
        )
        for place in places
    ]


def get_place(db: Session, place_id: int) -> Place:
    place = db.get(Place, place_id)
    if place is None:
        raise NotFoundError()
    return place


def get_place_detail(db: Session, place_id: int, viewer_user_id: Optional[int]) -> PlaceDetailOut:
    """Full-relation read projected as the detail view."""
    stmt = with_list_relations(select(Place).where(Place.id == place_id))
    place = db.execute(stmt).scalar_one_or_none()
    if place is None:
        raise NotFoundError()

    reviews = (
        db.execute(
            select(Review)
            .options(joinedload(Review.user))
            .where(Review.place_id == place_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        .scalars()
        .all()
    )
    favorite_count = db.execute(
        select(func.count()).select_from(Favorite).where(Favorite.place_id == place_id)
    ).scalar_one()
    viewer_favorite = viewer_user_id is not None and db.get(Favorite, (viewer_user_id, place_id)) is not None

    aggregate = PlaceAggregate.from_place(
        place,
        reviews=reviews,
        review_count=len(reviews),
        favorite_count=favorite_count,
        favorite_user_ids=(viewer_user_id,) if viewer_favorite else (),
    )
    return to_detail_view(aggregate, viewer_user_id)
