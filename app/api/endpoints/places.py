"""Place endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import get_optional_user_id
from app.db.session import get_db
from app.schemas.place import PlaceCreate, PlaceDetailOut, PlaceListOut
from app.services.photos import PhotoStorage, get_photo_storage
from app.services.places import create_place, get_place_detail
from app.services.search import SearchCriteria, search_places

router = APIRouter(prefix="/places", tags=["places"])


@router.post("", response_model=PlaceListOut, status_code=status.HTTP_201_CREATED)
def create(
    payload: PlaceCreate,
    db: Session = Depends(get_db),
    storage: PhotoStorage = Depends(get_photo_storage),
    user_id: Optional[int] = Depends(get_optional_user_id),
) -> PlaceListOut:
    """Create a place with its features and photos."""
    if user_id is None and not settings.allow_anonymous_places:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Autenticacao necessaria.")
    return create_place(db, payload, storage, owner_id=user_id)


@router.get("", response_model=list[PlaceListOut])
def list_places(
    search: Optional[str] = None,
    category: Optional[str] = None,
    features: Optional[list[str]] = Query(None, description="Repeated or comma-separated keys"),
    postal_code: Optional[str] = None,
    neighborhood: Optional[str] = None,
    city: Optional[str] = None,
    street: Optional[str] = None,
    number: Optional[str] = None,
    complement: Optional[str] = None,
    region: Optional[str] = None,
    limit: Optional[str] = Query(None, description="1-50, defaults to 50"),
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_optional_user_id),
) -> list[PlaceListOut]:
    """Search places; every criterion is optional and they combine with AND."""
    criteria = SearchCriteria.from_params(
        search=search,
        category=category,
        features=features,
        postal_code=postal_code,
        neighborhood=neighborhood,
        city=city,
        street=street,
        number=number,
        complement=complement,
        region=region,
        limit=limit,
    )
    return search_places(db, criteria, user_id)


@router.get("/{place_id}", response_model=PlaceDetailOut)
def get_place(
    place_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_optional_user_id),
) -> PlaceDetailOut:
    """Place detail including reviews."""
    return get_place_detail(db, place_id, user_id)
