"""wipecert API service.

Routes served by the app:
- Wipe-report upload and certificate issuance (API key gated)
- Public JSON and HTML verification of issued certificates
- Original report download
- Static serving of certificate PDFs and QR codes under /uploads

`create_app()` builds a fully wired instance; tests pass their own settings
and key pair, production reads both from the environment.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from wipecert.api.middleware import ErrorHandlerMiddleware, RequestIDMiddleware
from wipecert.api.middleware.auth import API_KEY_HEADER
from wipecert.api.middleware.request_id import REQUEST_ID_HEADER
from wipecert.api.routers import download_router, pages_router, upload_router, verify_router
from wipecert.api.templates import get_templates
from wipecert.db import close_engine, create_schema, init_engine
from wipecert.services.pdf import CertificateRenderer
from wipecert.services.signing import load_or_create_signing_context
from wipecert.services.storage import FileStorage

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from wipecert.core.config import Settings
    from wipecert.services.signing import SigningContext

logger = logging.getLogger(__name__)

API_TITLE = "wipecert API"
API_DESCRIPTION = """
Signed certificates for disk-wipe reports.

## Routes

- **/upload** - Certify a PDF wipe report (API key)
- **/validate-key** - Check an API key
- **/verify/{id}** - Verification page (HTML, QR code target)
- **/api/verify/{id}** - Verification result (JSON)
- **/download/{id}** - Original report
- **/uploads/** - Certificate PDFs and QR codes

## Documentation

- OpenAPI spec: `/api/openapi.json`
- Swagger UI: `/api/docs`
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Loads or creates the issuer key pair unless one was injected, creates
    the schema when configured to, and disposes of the engine on shutdown.
    """
    settings: Settings = app.state.settings

    if app.state.signing_context is None:
        app.state.signing_context = load_or_create_signing_context(
            settings.signing.key_dir,
            key_size=settings.signing.key_size,
        )

    if settings.database.auto_create:
        await create_schema()

    logger.info(
        "wipecert API ready: environment=%s, policy_hash=%s",
        settings.environment.value,
        settings.get_policy_hash()[:16],
    )

    yield

    logger.info("Shutting down wipecert API")
    await close_engine()


def create_app(
    settings: Settings | None = None,
    signing_context: SigningContext | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Optional Settings instance. Defaults to the cached
            settings loaded from the environment.
        signing_context: Optional issuer key pair. When omitted, the key is
            loaded (or generated) from ``signing.key_dir`` at start-up.

    Returns:
        Configured FastAPI application ready to serve requests.

    Example:
        app = create_app()

        # For testing (no lifespan under ASGITransport)
        app = create_app(test_settings, signing_context=context)
    """
    if settings is None:
        from wipecert.core.settings import get_settings

        settings = get_settings()

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=settings.app_version,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    storage = FileStorage.from_settings(settings.storage)
    storage.ensure_directories()

    app.state.settings = settings
    app.state.signing_context = signing_context
    app.state.storage = storage
    app.state.renderer = CertificateRenderer(issuer_name=settings.signing.issuer_name)
    app.state.templates = get_templates()

    init_engine(settings.database)

    app.mount("/uploads", StaticFiles(directory=str(storage.artifact_dir)), name="uploads")

    _add_middleware(app, settings)
    _include_routers(app)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Liveness check."""
        return {"ok": True}

    logger.info("wipecert API application created (version=%s)", settings.app_version)

    return app


def _add_middleware(app: FastAPI, settings: Settings) -> None:
    """Add middleware to the application.

    The last middleware added is the outermost: CORS, then request ID, then
    error handling, so error bodies can carry the request ID.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", API_KEY_HEADER, REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )


def _include_routers(app: FastAPI) -> None:
    # HTML pages and browser-facing routes at the root
    app.include_router(pages_router)
    app.include_router(download_router)
    app.include_router(upload_router)

    # JSON API under /api
    app.include_router(verify_router, prefix="/api")
