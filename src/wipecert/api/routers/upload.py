"""Upload API router.

Wipe reports are submitted here for certification. Both endpoints are
gated by the shared API key.

Routes:
- POST /upload : certify one PDF wipe report (multipart field ``report``)
- POST /validate-key : check an API key without uploading anything
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import JSONResponse

from wipecert.api.dependencies import AppSettings, DbSession, Pipeline, PublicBaseUrl
from wipecert.api.middleware.auth import api_key_matches, extract_api_key, require_api_key
from wipecert.api.middleware.errors import UnsupportedMediaError, ValidationAPIError
from wipecert.api.schemas.upload import UploadResponse, ValidateKeyResponse
from wipecert.api.schemas.verify import ErrorResponse
from wipecert.services.issuance import Submission
from wipecert.services.record_store import RecordStore

logger = logging.getLogger(__name__)

ACCEPTED_MEDIA_TYPE = "application/pdf"
DEFAULT_REPORT_NAME = "report.pdf"

router = APIRouter(
    tags=["upload"],
    responses={
        400: {"description": "Missing, non-PDF or unrecognised report", "model": ErrorResponse},
        401: {"description": "Invalid or missing API key", "model": ErrorResponse},
        500: {"description": "Certification failed", "model": ErrorResponse},
    },
)


@router.post(
    "/upload",
    response_model=UploadResponse,
    dependencies=[Depends(require_api_key)],
)
async def upload_report(
    pipeline: Pipeline,
    session: DbSession,
    base_url: PublicBaseUrl,
    report: UploadFile | None = File(default=None, description="PDF wipe report"),
) -> UploadResponse:
    """Certify an uploaded wipe report.

    The report is checked for the expected wipe-report content, signed,
    rendered into a certificate PDF with a verification QR code, and
    recorded. Either all of that happens or nothing is kept.
    """
    if report is None:
        raise ValidationAPIError("No file uploaded", detail={"field": "report"})

    if report.content_type != ACCEPTED_MEDIA_TYPE:
        logger.info("Rejected upload %s: media type %s", report.filename, report.content_type)
        raise UnsupportedMediaError(report.content_type)

    content = await report.read()
    submission = Submission(
        content=content,
        original_name=report.filename or DEFAULT_REPORT_NAME,
        mime_type=ACCEPTED_MEDIA_TYPE,
    )

    result = await pipeline.issue(submission, RecordStore(session), base_url)

    return UploadResponse(
        id=result.id,
        verify_url=result.verify_url,
        qr_url=f"{base_url}/uploads/{result.record.qr_name}",
        certificate_url=f"{base_url}/uploads/{result.record.certificate_name}",
    )


@router.post(
    "/validate-key",
    response_model=ValidateKeyResponse,
    response_model_exclude_none=True,
    responses={401: {"description": "Invalid API key", "model": ValidateKeyResponse}},
)
async def validate_key(request: Request, settings: AppSettings) -> ValidateKeyResponse | JSONResponse:
    """Tell a client whether its API key is accepted."""
    provided, _ = await extract_api_key(request)
    if not api_key_matches(provided, settings.api_key):
        return JSONResponse(
            status_code=401,
            content={"valid": False, "error": "Invalid API key"},
        )
    return ValidateKeyResponse(valid=True)
