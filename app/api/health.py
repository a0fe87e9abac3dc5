"""Health check and service info endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app import __version__
from app.api.deps import DbSession
from app.core.config import Settings, get_settings
from app.core.database import check_db_connected
from app.schemas.health import HealthResponse, InfoResponse

router = APIRouter()

PUBLIC_ROUTES = [
    "/api/items",
    "/api/items/{id}",
    "/register",
    "/login",
    "/logout",
    "/check-auth",
    "/change-password",
    "/admin/users",
    "/admin/promote",
    "/admin/demote",
]


@router.get("/health", response_model=HealthResponse)
def get_health(
    db: DbSession,
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
    )


@router.get("/info", response_model=InfoResponse)
def get_info() -> InfoResponse:
    """Project name, version and the public routes."""
    return InfoResponse(project="Wanderlist", version=__version__, routes=PUBLIC_ROUTES)
