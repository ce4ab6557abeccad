"""Error taxonomy for the certification pipeline.

Every failure the pipeline can surface carries one ErrorKind. Callers
branch on the kind (or the exception class), never on message text.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced by the pipeline."""

    ADMISSION_REJECTED = "admission_rejected"
    KEY_UNAVAILABLE = "key_unavailable"
    ARTIFACT_FAILURE = "artifact_failure"
    STORE_FAILURE = "store_failure"
    NOT_FOUND = "not_found"


class CertificationError(Exception):
    """Base exception for certification pipeline errors.

    Attributes:
        kind: The failure kind.
        message: Human-readable error description.
        detail: Optional structured context, safe to return to clients.
    """

    kind: ErrorKind

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)


class AdmissionRejectedError(CertificationError):
    """The submitted document is not recognised as a wipe report."""

    kind = ErrorKind.ADMISSION_REJECTED


class KeyUnavailableError(CertificationError):
    """The issuer key pair is missing or unreadable."""

    kind = ErrorKind.KEY_UNAVAILABLE


class ArtifactGenerationError(CertificationError):
    """The certificate PDF or the QR image could not be produced."""

    kind = ErrorKind.ARTIFACT_FAILURE

    def __init__(
        self,
        message: str,
        *,
        artifact: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.artifact = artifact
        self.cause = cause
        super().__init__(message, detail={"artifact": artifact} if artifact else None)


class StoreError(CertificationError):
    """The record could not be durably written or read."""

    kind = ErrorKind.STORE_FAILURE


class CertificateNotFoundError(CertificationError):
    """No certificate exists for the requested identifier."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"No certificate for id: {record_id}")
