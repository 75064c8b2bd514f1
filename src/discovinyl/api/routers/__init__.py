"""API router initialization."""

# Hey future me, this is the MAIN API router aggregator. main.py mounts it under /api, so the
# prefixes below become /api/health, /api/vinyl/..., /api/metadata/... Inside vinyl.py the
# /stats route is declared before /{record_id} - keep it that way.

from fastapi import APIRouter

from discovinyl.api.routers import auth, health, image_search, metadata, vinyl

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(vinyl.router, prefix="/vinyl", tags=["Vinyl"])
api_router.include_router(metadata.router, prefix="/metadata", tags=["Metadata"])
api_router.include_router(image_search.router, prefix="/image-search", tags=["Image Search"])

__all__ = [
    "api_router",
    "auth",
    "health",
    "image_search",
    "metadata",
    "vinyl",
]
