"""Favorite toggling."""

from __future__ import annotations

import logging

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.models.favorite import Favorite
from app.services.features import upsert_insert
from app.services.places import get_place

logger = logging.getLogger(__name__)


def add_favorite(db: Session, place_id: int, user_id: int) -> None:
    """Idempotent: a second add for the same pair is a no-op."""
    get_place(db, place_id)
    insert = upsert_insert(db)
    db.execute(
        insert(Favorite)
        .values(user_id=user_id, place_id=place_id)
        .on_conflict_do_nothing(index_elements=["user_id", "place_id"])
    )
    db.commit()
    logger.info("User %s favorited place %s", user_id, place_id)


def remove_favorite(db: Session, place_id: int, user_id: int) -> None:
    """Removing a favorite that does not exist is not an error."""
    result = db.execute(
        delete(Favorite).where(Favorite.user_id == user_id, Favorite.place_id == place_id)
    )
    db.commit()
    if result.rowcount:
        logger.info("User %s unfavorited place %s", user_id, place_id)
