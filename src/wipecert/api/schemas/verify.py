"""Pydantic schemas for the verification API.

The verification response carries only what the certificate already
shows: stored metadata, the text snippet and the signature. Nothing here
needs authentication.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from wipecert.services.verification import VerificationResult


class RecordView(BaseModel):
    """Stored metadata of a certified submission."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Certificate identifier")
    original_name: str = Field(..., description="Filename declared at upload")
    mime_type: str = Field(..., description="Declared media type")
    size: int = Field(..., ge=0, description="Document size in bytes")
    upload_time: str = Field(..., description="UTC upload time, ISO-8601 with milliseconds")
    extracted_text_snippet: str = Field(default="", description="First characters of the report text")


class VerificationResponse(BaseModel):
    """Trust result for one certificate."""

    found: bool = Field(..., description="Whether a record exists for the id")
    valid: bool = Field(..., description="Whether the stored signature matches the record")
    record: RecordView | None = Field(default=None, description="Stored record metadata")
    signature: str | None = Field(default=None, description="Base64 RSA-SHA256 signature")

    @classmethod
    def from_result(cls, result: VerificationResult) -> VerificationResponse:
        record = None
        if result.record is not None:
            record = RecordView.model_validate(result.record.to_dict())
        return cls(
            found=result.found,
            valid=result.valid,
            record=record,
            signature=result.signature,
        )


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    request_id: str | None = Field(default=None, description="Correlation ID")
    detail: dict | None = Field(default=None, description="Additional context")
