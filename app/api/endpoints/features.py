"""Feature tag listing."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.review import FeatureTagOut
from app.services.features import list_features

router = APIRouter(prefix="/features", tags=["features"])


@router.get("", response_model=list[FeatureTagOut])
def get_features(db: Session = Depends(get_db)) -> list[FeatureTagOut]:
    """Every registered tag, including ones introduced by submissions."""
    return [FeatureTagOut.model_validate(tag) for tag in list_features(db)]
