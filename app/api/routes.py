"""Root API router."""

from fastapi import APIRouter

from app.api.endpoints import favorites, features, places, reviews

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok"}


router.include_router(features.router)
router.include_router(places.router)
router.include_router(reviews.router)
router.include_router(favorites.router)
