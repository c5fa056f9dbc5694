"""Favorite endpoints nested under a place."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.core.security import get_current_user_id
from app.db.session import get_db
from app.schemas.review import FavoriteResult
from app.services.favorites import add_favorite, remove_favorite

router = APIRouter(prefix="/places/{place_id}/favorites", tags=["favorites"])


@router.post("", response_model=FavoriteResult, status_code=status.HTTP_201_CREATED)
def favorite(
    place_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> FavoriteResult:
    add_favorite(db, place_id, user_id)
    return FavoriteResult()


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def unfavorite(
    place_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> Response:
    remove_favorite(db, place_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
