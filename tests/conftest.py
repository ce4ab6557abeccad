"""Pytest configuration and shared fixtures.

Tests run against a throwaway SQLite database (aiosqlite) and temporary
artifact, report and key directories under ``tmp_path``. PDFs used as
uploads are rendered with WeasyPrint, so text extraction, rendering and
QR encoding all run for real.
"""

import html
from collections.abc import AsyncGenerator

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from weasyprint import HTML

from wipecert.api import create_app
from wipecert.core.config import DatabaseSettings, Settings, SigningSettings, StorageSettings
from wipecert.core.settings import clear_settings_cache
from wipecert.db import close_engine, create_schema, get_async_session, init_engine
from wipecert.services.pdf import CertificateRenderer
from wipecert.services.signing import SigningContext
from wipecert.services.storage import FileStorage

TEST_API_KEY = "test-api-key-0123456789"  # noqa: S105

WIPE_REPORT_LINES = [
    "Wipe Record",
    "Device: /dev/sda (Samsung SSD 860 EVO 500GB)",
    "Wipe Method: NIST 800-88 Purge (3 passes)",
    "Status: Completed",
]

UNRELATED_LINES = [
    "Quarterly sales summary",
    "Device inventory is attached in the appendix.",
]


def make_pdf(lines: list[str]) -> bytes:
    """Render a small PDF whose text is the given lines."""
    body = "".join(f"<p>{html.escape(line)}</p>" for line in lines)
    return HTML(string=f"<html><body>{body}</body></html>").write_pdf()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def clean_settings_cache():
    """Ensure settings cache is clean for each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing every directory and the database at tmp_path."""
    return Settings(
        api_key=TEST_API_KEY,
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"),
        storage=StorageSettings(
            artifact_dir=tmp_path / "uploads",
            report_dir=tmp_path / "reports",
        ),
        signing=SigningSettings(key_dir=tmp_path / "keys"),
    )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session")
def wipe_report_pdf() -> bytes:
    """A PDF carrying all four wipe-report markers."""
    return make_pdf(WIPE_REPORT_LINES)


@pytest.fixture(scope="session")
def unrelated_pdf() -> bytes:
    """A PDF carrying a single marker ("Device")."""
    return make_pdf(UNRELATED_LINES)


# ---------------------------------------------------------------------------
# Keys, storage, renderer
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session")
def signing_context() -> SigningContext:
    """Issuer key pair shared by the session (RSA generation is slow)."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return SigningContext.from_private_key(private_key)


@pytest.fixture(scope="session")
def other_signing_context() -> SigningContext:
    """A second, unrelated key pair."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return SigningContext.from_private_key(private_key)


@pytest.fixture
def storage(test_settings: Settings) -> FileStorage:
    file_storage = FileStorage.from_settings(test_settings.storage)
    file_storage.ensure_directories()
    return file_storage


@pytest.fixture(scope="session")
def renderer() -> CertificateRenderer:
    return CertificateRenderer(issuer_name="Wipe-Certs System")


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------
@pytest.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh engine and schema on the per-test SQLite database."""
    await close_engine()
    engine = init_engine(test_settings.database)
    await create_schema()
    yield engine
    await close_engine()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with get_async_session() as session:
        yield session


# ---------------------------------------------------------------------------
# API client fixture (in-process testing via ASGI transport)
# ---------------------------------------------------------------------------
@pytest.fixture
def test_app(test_settings: Settings, signing_context: SigningContext, db_engine: AsyncEngine):
    """Create a test FastAPI application instance.

    ASGITransport does not run the lifespan, so the key pair is injected
    and the schema comes from the db_engine fixture.
    """
    return create_app(test_settings, signing_context=signing_context)


@pytest.fixture
async def api_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing the API.

    Uses httpx with ASGI transport for in-process testing.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def api_key() -> str:
    return TEST_API_KEY


@pytest.fixture
def auth_headers(api_key: str) -> dict[str, str]:
    return {"X-API-Key": api_key}
