"""
FastAPI application for the investor property matching service.

Production deployment configuration via environment variables.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.errors import MatchingError
from core.identity import IdentityProvider, build_identity_provider
from core.matching import MatchingService
from core.notifications import MailSender, NotificationService, build_mail_sender
from core.preferences import PreferenceService
from core.storage import DataStore, build_data_store
from utils.config import Config
from web.admin_routes import router as admin_router
from web.cron_routes import router as cron_router
from web.investor_routes import router as investor_router


logger = logging.getLogger(__name__)

# =============================================================================
# Environment Configuration
# =============================================================================

# Production mode detection
IS_PRODUCTION = os.getenv("RAILWAY_ENVIRONMENT") is not None or os.getenv("PRODUCTION", "").lower() == "true"

# CORS configuration - locked down for production
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",") if os.getenv("ALLOWED_ORIGINS") else []
if not ALLOWED_ORIGINS and not IS_PRODUCTION:
    # Development fallback only
    ALLOWED_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

# Debug mode - NEVER enabled in production
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true" and not IS_PRODUCTION

VERSION = "0.1.0"


# =============================================================================
# Exception Handlers
# =============================================================================


def handle_matching_error(request: Request, exc: MatchingError) -> JSONResponse:
    """Map domain errors to their HTTP status."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and query strings as 400 with the field."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    return JSONResponse(
        status_code=400,
        content={
            "error": first.get("msg", "Invalid request"),
            "field": ".".join(location) or None,
        },
    )


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    config: Optional[Config] = None,
    store: Optional[DataStore] = None,
    identity: Optional[IdentityProvider] = None,
    mailer: Optional[MailSender] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Collaborators default to the ones the configuration selects; tests pass
    in-memory ones.
    """
    config = config or Config.load()

    app = FastAPI(
        title="Ace Property Matching",
        description="Investor preference matching for rental listings",
        version=VERSION,
        # Production settings: disable docs/redoc for private deployment
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None if IS_PRODUCTION else "/redoc",
        openapi_url=None if IS_PRODUCTION else "/openapi.json",
        debug=DEBUG_MODE,
    )

    # ==========================================================================
    # Healthcheck endpoints are registered FIRST. Railway probes "/".
    # These endpoints are synchronous, perform NO IO, and return immediately.
    # ==========================================================================
    @app.get("/", include_in_schema=False)
    def root():
        """Root healthcheck. No dependencies, no IO."""
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        """Secondary health endpoint. No dependencies, no IO."""
        return {
            "status": "healthy",
            "version": VERSION,
            "environment": "production" if IS_PRODUCTION else "development",
        }

    # CORS middleware - locked down for production
    if ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    # Services
    if store is None:
        store = build_data_store(config)
    if identity is None:
        identity = build_identity_provider(config)
    if mailer is None:
        mailer = build_mail_sender(config)

    matching = MatchingService(store, page_size=config.match_page_size)
    notifier = NotificationService(
        mailer,
        matching,
        identity=identity,
        admin_email=config.admin_email,
        site_url=config.site_url,
    )

    app.state.config = config
    app.state.store = store
    app.state.identity = identity
    app.state.matching = matching
    app.state.notifier = notifier
    app.state.preferences = PreferenceService(store, matching, notifier)

    # Error mapping
    app.add_exception_handler(MatchingError, handle_matching_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)

    # Routes
    app.include_router(investor_router)
    app.include_router(admin_router)
    app.include_router(cron_router)

    logger.info(
        "Matching service configured: store=%s identity=%s mailer=%s",
        type(store).__name__,
        type(identity).__name__,
        type(mailer).__name__,
    )
    return app


# Create app instance for uvicorn
app = create_app()
