"""HTTP routes."""

from fastapi import APIRouter

from app.api import admin, auth, health, items

router = APIRouter()
router.include_router(health.router, prefix="/api", tags=["health"])
router.include_router(items.router, prefix="/api/items", tags=["items"])
router.include_router(auth.router, tags=["auth"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
