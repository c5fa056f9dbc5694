"""Review writes and listings."""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.core.errors import ValidationError
from app.models.review import Review
from app.schemas.place import ReviewOut
from app.services.address import clean_text, to_float
from app.services.places import get_place
from app.services.projector import project_review

logger = logging.getLogger(__name__)


def parse_rating(raw: Any) -> int:
    """Numeric rating in [1, 5], truncated to an integer."""
    value = to_float(raw)
    if value is None or value < 1 or value > 5:
        raise ValidationError("invalid_rating", "Nota deve ser um numero entre 1 e 5.")
    return int(value)


def add_review(
    db: Session,
    place_id: int,
    user_id: int,
    rating: Any,
    comment: Optional[str] = None,
) -> ReviewOut:
    get_place(db, place_id)
    review = Review(
        place_id=place_id,
        user_id=user_id,
        rating=parse_rating(rating),
        comment=clean_text(comment) or None,
    )
    db.add(review)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(review)
    logger.info("User %s reviewed place %s with %s", user_id, place_id, review.rating)
    return project_review(review)


def list_reviews(db: Session, place_id: int) -> list[ReviewOut]:
    """Reviews of a place, newest first."""
    get_place(db, place_id)
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
    return [project_review(review) for review in reviews]
