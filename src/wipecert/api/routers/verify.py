"""Verification API router.

Public, read-only re-verification of issued certificates. The stored
record is checked against its stored signature on every request.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from wipecert.api.dependencies import VerifierDep
from wipecert.api.schemas.verify import ErrorResponse, VerificationResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/verify",
    tags=["verify"],
    responses={
        404: {"description": "No certificate for this id", "model": ErrorResponse},
    },
)


@router.get("/{record_id}", response_model=VerificationResponse, response_model_by_alias=True)
async def verify_certificate(record_id: str, verifier: VerifierDep) -> VerificationResponse:
    """Verify the certificate with the given id.

    Returns ``valid: false`` when the stored record no longer matches its
    signature. Unknown ids are a 404 ``certificate_not_found``, never an
    invalid result.
    """
    result = await verifier.require(record_id)
    return VerificationResponse.from_result(result)
