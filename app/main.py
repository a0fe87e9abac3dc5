"""FastAPI application entrypoint. No business logic; only wiring, middleware and error rendering.

Run with:  uvicorn app.main:app
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import __version__
from app.api import router as api_router
from app.core.config import Settings, get_settings, settings as default_settings
from app.core.database import SessionLocal, check_db_connected
from app.services.errors import ServiceError, StoreError, ValidationFailed, errors_from_pydantic
from app.services.identity import ensure_bootstrap_admin

logging.basicConfig(
    level=default_settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def _startup(session_factory: Callable[[], Session], settings: Settings) -> None:
    """Fail fast when the database is unreachable, then ensure the bootstrap admin."""
    db = session_factory()
    try:
        if not check_db_connected(db):
            raise RuntimeError("Database is not reachable; refusing to start")
        password = settings.ADMIN_PASSWORD.get_secret_value() if settings.ADMIN_PASSWORD else None
        ensure_bootstrap_admin(db, settings.ADMIN_USERNAME, password)
    finally:
        db.close()


def create_app(
    settings: Settings = default_settings,
    session_factory: Callable[[], Session] = SessionLocal,
) -> FastAPI:
    """Build the application. Tests pass their own settings and session factory."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        _startup(session_factory, settings)
        logger.info("Wanderlist API started (env=%s)", settings.APP_ENV)
        yield

    app = FastAPI(
        title="Wanderlist API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = ValidationFailed(errors=errors_from_pydantic(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(SQLAlchemyError)
    async def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Database error on %s %s", request.method, request.url.path)
        error = StoreError("Database error")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    # Route dependencies read the settings this app was built with.
    app.dependency_overrides[get_settings] = lambda: settings
    app.include_router(api_router)

    @app.api_route(
        "/api/{path:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
    def api_not_found(path: str) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": "not_found", "detail": "API route not found"})

    if settings.STATIC_DIR and Path(settings.STATIC_DIR).is_dir():
        app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
    else:

        @app.get("/")
        def root() -> dict[str, str]:
            """Root route; minimal payload for discovery."""
            return {"message": "Wanderlist API"}

    return app


app = create_app()
