"""Pydantic schemas for the upload endpoints.

Field names are snake_case in Python and camelCase on the wire, which is
what the upload client expects.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UploadResponse(BaseModel):
    """Response for a successfully certified upload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = Field(default=True, description="Always true on 200 responses")
    id: str = Field(..., description="Certificate identifier")
    verify_url: str = Field(..., description="Public verification page URL")
    qr_url: str = Field(..., description="URL of the verification QR code PNG")
    certificate_url: str = Field(..., description="URL of the signed certificate PDF")


class ValidateKeyResponse(BaseModel):
    """Result of an API key check."""

    valid: bool = Field(..., description="Whether the supplied key is accepted")
    error: str | None = Field(default=None, description="Reason when the key is rejected")
