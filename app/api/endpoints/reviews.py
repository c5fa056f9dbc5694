"""Review endpoints nested under a place."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.security import get_current_user_id, get_optional_user_id
from app.db.session import get_db
from app.schemas.place import ReviewOut
from app.schemas.review import ReviewCreate
from app.services.reviews import add_review, list_reviews

router = APIRouter(prefix="/places/{place_id}/reviews", tags=["reviews"])


@router.get("", response_model=list[ReviewOut])
def get_reviews(
    place_id: int,
    db: Session = Depends(get_db),
    _viewer: Optional[int] = Depends(get_optional_user_id),
) -> list[ReviewOut]:
    return list_reviews(db, place_id)


@router.post("", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
def create_review(
    place_id: int,
    payload: ReviewCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> ReviewOut:
    return add_review(db, place_id, user_id, payload.rating, payload.comment)
