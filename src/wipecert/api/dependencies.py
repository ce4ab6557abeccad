"""FastAPI dependencies shared by the routers.

Long-lived objects (settings, issuer key, storage, renderer) are created
once by the app factory and kept on ``app.state``; these helpers hand them
to the routes.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from wipecert.core.config import Settings
from wipecert.core.errors import KeyUnavailableError
from wipecert.services.issuance import IssuancePipeline
from wipecert.services.pdf import CertificateRenderer
from wipecert.services.record_store import RecordStore
from wipecert.services.signing import SigningContext
from wipecert.services.storage import FileStorage
from wipecert.services.verification import Verifier


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Uses the application's async session factory.
    """
    from wipecert.db import get_async_session

    async with get_async_session() as session:
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


AppSettings = Annotated[Settings, Depends(get_app_settings)]


def get_signing_context(request: Request) -> SigningContext:
    """Issuer key pair loaded at start-up.

    Raises:
        KeyUnavailableError: If the application started without a key.
    """
    context = getattr(request.app.state, "signing_context", None)
    if context is None:
        raise KeyUnavailableError("Issuer key pair is not loaded")
    return context


Signer = Annotated[SigningContext, Depends(get_signing_context)]


def get_storage(request: Request) -> FileStorage:
    return request.app.state.storage


Storage = Annotated[FileStorage, Depends(get_storage)]


def get_renderer(request: Request) -> CertificateRenderer:
    return request.app.state.renderer


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


Templates = Annotated[Jinja2Templates, Depends(get_templates)]


def get_public_base_url(request: Request, settings: AppSettings) -> str:
    """Base URL for links handed to clients.

    The configured public URL wins; otherwise the URL the request came in on.
    """
    if settings.public_base_url:
        return settings.public_base_url
    return str(request.base_url).rstrip("/")


PublicBaseUrl = Annotated[str, Depends(get_public_base_url)]


def get_pipeline(
    settings: AppSettings,
    context: Signer,
    storage: Storage,
    renderer: Annotated[CertificateRenderer, Depends(get_renderer)],
) -> IssuancePipeline:
    return IssuancePipeline(
        context,
        renderer,
        storage,
        markers=settings.admission.markers,
        threshold=settings.admission.threshold,
        qr_size=settings.qr.size,
    )


Pipeline = Annotated[IssuancePipeline, Depends(get_pipeline)]


def get_record_store(session: DbSession) -> RecordStore:
    return RecordStore(session)


Records = Annotated[RecordStore, Depends(get_record_store)]


def get_verifier(records: Records, context: Signer) -> Verifier:
    return Verifier(records, context)


VerifierDep = Annotated[Verifier, Depends(get_verifier)]
