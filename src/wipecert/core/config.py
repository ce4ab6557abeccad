"""Configuration management for wipecert services.

Centralized configuration using Pydantic Settings. All values are loaded
from environment variables with the WIPECERT_ prefix; nested settings use
a double underscore as delimiter (e.g., WIPECERT_DATABASE__URL).

Example:
    export WIPECERT_ENVIRONMENT=production
    export WIPECERT_API_KEY=change-me
    export WIPECERT_DATABASE__URL=sqlite+aiosqlite:////var/lib/wipecert/uploads.db
"""

from __future__ import annotations

import hashlib
import json
import logging
from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import Annotated, Any, Self

from pydantic import (
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Development-only shared secret, refused in production
DEFAULT_API_KEY = "secret123"  # noqa: S105

DEFAULT_MARKERS = ["Wipe Record", "Device", "Wipe Method", "Status"]


class Environment(str, Enum):
    """Deployment environment.

    Production environment has additional constraints.
    """

    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class DatabaseSettings(BaseSettings):
    """Record store connection settings.

    Any SQLAlchemy async URL works; SQLite (aiosqlite) is the default and
    PostgreSQL (psycopg) is supported for larger deployments.
    """

    model_config = SettingsConfigDict(
        env_prefix="WIPECERT_DATABASE__",
        extra="ignore",
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./uploads.db",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(
        default=False,
        description="Enable SQL query logging (dev only)",
    )
    auto_create: bool = Field(
        default=True,
        description="Create missing tables at startup (disable when using Alembic)",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Normalize sync driver URLs to their async counterparts."""
        if not v:
            msg = "Database URL cannot be empty"
            raise ValueError(msg)
        if v.startswith("sqlite:///"):
            return v.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg://", 1)
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+psycopg://", 1)
        return v


class StorageSettings(BaseSettings):
    """On-disk locations for generated artifacts and retained reports."""

    model_config = SettingsConfigDict(
        env_prefix="WIPECERT_STORAGE__",
        extra="ignore",
    )

    artifact_dir: Path = Field(
        default=Path("uploads"),
        description="Directory for certificate PDFs and QR images (served at /uploads)",
    )
    report_dir: Path = Field(
        default=Path("reports"),
        description="Directory for retained original wipe reports",
    )


class SigningSettings(BaseSettings):
    """Issuer key pair settings."""

    model_config = SettingsConfigDict(
        env_prefix="WIPECERT_SIGNING__",
        extra="ignore",
    )

    key_dir: Path = Field(
        default=Path("keys"),
        description="Directory holding private.pem and public.pem",
    )
    key_size: Annotated[int, Field(ge=2048, le=8192)] = Field(
        default=2048,
        description="RSA modulus size used when generating a new key pair",
    )
    issuer_name: str = Field(
        default="Wipe-Certs System",
        description="Issuer name printed on certificates",
    )


class AdmissionSettings(BaseSettings):
    """Marker phrase heuristic used to recognise wipe reports."""

    model_config = SettingsConfigDict(
        env_prefix="WIPECERT_ADMISSION__",
        extra="ignore",
    )

    markers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MARKERS),
        description="Marker phrases searched case-insensitively in the report text",
    )
    threshold: Annotated[int, Field(ge=1)] = Field(
        default=3,
        description="Minimum number of markers a report must contain",
    )

    @model_validator(mode="after")
    def validate_threshold(self) -> Self:
        """Threshold cannot exceed the number of markers."""
        if not self.markers:
            msg = "At least one admission marker is required"
            raise ValueError(msg)
        if self.threshold > len(self.markers):
            msg = (
                f"Admission threshold ({self.threshold}) exceeds the number "
                f"of markers ({len(self.markers)})"
            )
            raise ValueError(msg)
        return self


class QRSettings(BaseSettings):
    """Verification QR code settings."""

    model_config = SettingsConfigDict(
        env_prefix="WIPECERT_QR__",
        extra="ignore",
    )

    size: Annotated[int, Field(ge=100, le=2000)] = Field(
        default=300,
        description="Edge length of the QR PNG in pixels",
    )


class Settings(BaseSettings):
    """Main wipecert configuration container.

    Example environment variables:
        WIPECERT_ENVIRONMENT=production
        WIPECERT_API_KEY=...
        WIPECERT_PUBLIC_BASE_URL=https://certs.example.com
        WIPECERT_SIGNING__KEY_DIR=/var/lib/wipecert/keys
    """

    model_config = SettingsConfigDict(
        env_prefix="WIPECERT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    # Core settings
    environment: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev, staging, production)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode (never in production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Shared secret for the upload endpoint
    api_key: SecretStr = Field(
        default=SecretStr(DEFAULT_API_KEY),
        description="Shared API key required to upload reports",
    )
    public_base_url: str | None = Field(
        default=None,
        description="Base URL used in verification links (defaults to the request URL)",
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    signing: SigningSettings = Field(default_factory=SigningSettings)
    admission: AdmissionSettings = Field(default_factory=AdmissionSettings)
    qr: QRSettings = Field(default_factory=QRSettings)

    # API settings
    api_host: str = Field(
        default="127.0.0.1",
        description="API server bind address",
    )
    api_port: Annotated[int, Field(ge=1, le=65535)] = Field(
        default=3000,
        description="API server port",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://127.0.0.1:5500", "http://localhost:5500"],
        description="Origins allowed to call the API from a browser",
    )

    app_name: str = Field(
        default="wipecert",
        description="Application name for logging and UI",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is a standard logging level name."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            msg = f"Log level must be one of: {', '.join(sorted(allowed))}"
            raise ValueError(msg)
        return v.upper()

    @field_validator("public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Verification URLs are built as <base>/verify/<id>."""
        if v is None:
            return None
        v = v.strip().rstrip("/")
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            msg = "public_base_url must start with http:// or https://"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_production_constraints(self) -> Self:
        """Enforce production environment constraints."""
        if self.environment == Environment.PRODUCTION:
            if self.debug:
                msg = "Debug mode is not allowed in production environment"
                raise ValueError(msg)
            if self.api_key.get_secret_value() == DEFAULT_API_KEY:
                msg = (
                    "Production environment requires a non-default API key. "
                    "Set WIPECERT_API_KEY."
                )
                raise ValueError(msg)
            if self.public_base_url and self.public_base_url.startswith("http://"):
                logger.warning(
                    "public_base_url uses plain HTTP in production; "
                    "verification links will not be served over TLS."
                )
        return self

    @cached_property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEV

    @cached_property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    def get_policy_snapshot(self) -> dict[str, Any]:
        """Generate a snapshot of the non-sensitive configuration.

        Returns:
            Dictionary containing non-sensitive configuration values.
        """
        return {
            "environment": self.environment.value,
            "signing": {
                "key_size": self.signing.key_size,
                "issuer_name": self.signing.issuer_name,
            },
            "admission": {
                "markers": self.admission.markers,
                "threshold": self.admission.threshold,
            },
            "qr": {"size": self.qr.size},
            "api": {
                "host": self.api_host,
                "port": self.api_port,
            },
            "app_version": self.app_version,
        }

    def get_policy_hash(self) -> str:
        """Compute a SHA-256 hex digest of the policy snapshot."""
        snapshot = self.get_policy_snapshot()
        snapshot_json = json.dumps(snapshot, sort_keys=True)
        return hashlib.sha256(snapshot_json.encode()).hexdigest()


class ConfigValidationError(Exception):
    """Raised when configuration validation fails.

    This exception should cause fast failure at startup to prevent
    running with invalid configuration.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


def validate_settings(settings: Settings) -> None:
    """Perform runtime validation that cannot be expressed declaratively.

    Args:
        settings: Settings instance to validate.

    Raises:
        ConfigValidationError: If validation fails.
    """
    storage = settings.storage
    if storage.artifact_dir.resolve() == storage.report_dir.resolve():
        # Original reports must not be exposed by the static artifact mount
        raise ConfigValidationError(
            "Artifact and report directories must differ.",
            field="storage.report_dir",
        )

    for path, field in (
        (storage.artifact_dir, "storage.artifact_dir"),
        (storage.report_dir, "storage.report_dir"),
        (settings.signing.key_dir, "signing.key_dir"),
    ):
        if path.exists() and not path.is_dir():
            raise ConfigValidationError(f"{path} exists and is not a directory.", field=field)

    logger.info(
        "Configuration validated. Policy hash: %s",
        settings.get_policy_hash(),
    )
