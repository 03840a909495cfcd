# =============================================================================
# app/main.py - FastAPI Application Factory
# =============================================================================
# Builds the PDX-DIY API: loads and validates configuration once, wires the
# shared resources onto app.state, and mounts middleware, handlers and
# routers.
#
# Usage:
#   uvicorn app.main:create_app --factory --reload
#
# Configuration is validated before the app object exists, so a bad
# environment stops the process before it accepts any traffic.
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.auth import routes as auth_routes
from app.config import ConfigSnapshot, MissingOrInvalidConfig, load_settings
from app.exceptions import (
    PdxDiyException,
    pdx_diy_exception_handler,
    validation_exception_handler,
)
from app.routers import events, health, public_config
from lib.analytics import AnalyticsHandle
from lib.database import Database
from lib.resend_client import ResendClient

logger = logging.getLogger(__name__)


def configure_logging(settings: ConfigSnapshot) -> None:
    """Root logging: DEBUG in development, INFO otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if settings.is_development else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: create missing tables
    - Shutdown: flush analytics, close database connections
    """
    settings = app.state.settings
    logger.info(f"Starting PDX-DIY API in {settings.runtime_mode.value} mode")
    logger.info(f"Session strategy: {settings.session_strategy}")

    app.state.database.create_all()

    yield

    logger.info("Shutting down PDX-DIY API")
    app.state.analytics.shutdown()
    app.state.database.dispose()


def create_app(
    settings: ConfigSnapshot | None = None,
    database: Database | None = None,
    analytics: AnalyticsHandle | None = None,
    mailer: ResendClient | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Any resource not passed in is built from the settings. Settings not
    passed in are loaded from the environment.

    Raises:
        MissingOrInvalidConfig: If the environment is invalid
    """
    if settings is None:
        try:
            settings = load_settings()
        except MissingOrInvalidConfig as e:
            logger.error(str(e))
            raise

    configure_logging(settings)

    app = FastAPI(
        title="PDX-DIY API",
        description="Community events: sign in with a magic link, create events, browse the public list.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Auth", "description": "Magic-link sign-in and sessions"},
            {"name": "Events", "description": "Create and browse community events"},
            {"name": "Config", "description": "Client-exposed configuration"},
            {"name": "Health", "description": "API health and readiness checks"},
        ],
    )

    app.state.settings = settings
    app.state.database = database or Database(settings.DATABASE_URL)
    app.state.analytics = analytics or AnalyticsHandle(settings)
    app.state.mailer = mailer or ResendClient(
        api_key=settings.AUTH_RESEND_KEY,
        sender=settings.AUTH_RESEND_FROM,
    )

    # =========================================================================
    # Middleware
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    app.add_exception_handler(PdxDiyException, pdx_diy_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.exception_handler(Exception)
    async def handle_general_exception(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception(f"Unexpected error: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            }
        )

    # =========================================================================
    # Routers
    # =========================================================================

    app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])
    app.include_router(events.router, prefix="/api/v1/events", tags=["Events"])
    app.include_router(public_config.router, prefix="/api/v1", tags=["Config"])
    app.include_router(health.router, prefix="/api/v1", tags=["Health"])

    @app.get("/", tags=["Root"])
    async def root():
        """
        Root endpoint - returns API info.
        """
        return {
            "name": "PDX-DIY API",
            "version": __version__,
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    return app
