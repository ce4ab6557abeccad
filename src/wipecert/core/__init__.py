"""wipecert core module.

Shared components used across the service:
- Configuration management
- Error taxonomy
"""

from wipecert.core.config import (
    AdmissionSettings,
    ConfigValidationError,
    DatabaseSettings,
    Environment,
    QRSettings,
    Settings,
    SigningSettings,
    StorageSettings,
)
from wipecert.core.errors import (
    AdmissionRejectedError,
    ArtifactGenerationError,
    CertificateNotFoundError,
    CertificationError,
    ErrorKind,
    KeyUnavailableError,
    StoreError,
)
from wipecert.core.settings import (
    clear_settings_cache,
    get_settings,
    get_settings_safe,
)

__all__ = [
    "AdmissionRejectedError",
    "AdmissionSettings",
    "ArtifactGenerationError",
    "CertificateNotFoundError",
    "CertificationError",
    "ConfigValidationError",
    "DatabaseSettings",
    "Environment",
    "ErrorKind",
    "KeyUnavailableError",
    "QRSettings",
    "Settings",
    "SigningSettings",
    "StorageSettings",
    "StoreError",
    "clear_settings_cache",
    "get_settings",
    "get_settings_safe",
]
