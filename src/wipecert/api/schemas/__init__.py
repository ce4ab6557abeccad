"""Pydantic request/response schemas for the wipecert API."""

from wipecert.api.schemas.upload import UploadResponse, ValidateKeyResponse
from wipecert.api.schemas.verify import ErrorResponse, RecordView, VerificationResponse

__all__ = [
    "ErrorResponse",
    "RecordView",
    "UploadResponse",
    "ValidateKeyResponse",
    "VerificationResponse",
]
