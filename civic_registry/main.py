"""Civic Registry API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from civic_registry import __version__
from civic_registry.core.config import settings
from civic_registry.core.exceptions import register_exception_handlers
from civic_registry.db.base import session_scope
from civic_registry.routers.deps import get_access_tokens, get_refresh_tokens
from civic_registry.schemas.common import HealthResponse
from civic_registry.services.auth import AuthService

# v1 routers
from civic_registry.routers.v1.auth import router as auth_v1_router
from civic_registry.routers.v1.persons import router as persons_v1_router

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.is_development else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def _bootstrap_admin() -> None:
    if not settings.admin_bootstrap_enabled:
        return
    async with session_scope() as session:
        svc = AuthService(session, get_access_tokens(), get_refresh_tokens())
        await svc.ensure_admin(settings.admin_email, settings.admin_password)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await _bootstrap_admin()
    logger.info("%s started (env=%s)", settings.app_name, settings.app_env)
    yield


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(auth_v1_router, prefix="/api/v1")
    app.include_router(persons_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env, version=__version__)

    return app


app = create_app()
