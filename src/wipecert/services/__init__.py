"""wipecert service layer.

This package contains the certification pipeline and its collaborators:
- Admission: marker-phrase check on extracted report text
- Records: submission record construction
- Signing: issuer key pair, canonical payload, RSA signatures
- CertificateRenderer: certificate PDF generation using WeasyPrint
- QR: verification QR codes
- FileStorage: artifact and report directories
- RecordStore: durable record storage (SQLAlchemy)
- IssuancePipeline: end-to-end issuance of one submission
- Verifier: re-verification of stored records
"""

from wipecert.services.admission import (
    ADMISSION_THRESHOLD,
    REQUIRED_MARKERS,
    AdmissionResult,
    check_admission,
    require_admission,
)
from wipecert.services.issuance import (
    IssuancePipeline,
    IssuanceResult,
    Submission,
    SubmissionState,
)
from wipecert.services.record_store import RecordStore
from wipecert.services.records import SubmissionRecord, build_record
from wipecert.services.signing import (
    SigningContext,
    canonical_payload,
    load_or_create_signing_context,
    sign_payload,
    sign_record,
    verify_signature,
)
from wipecert.services.storage import FileStorage
from wipecert.services.verification import VerificationResult, Verifier, verify_record

__all__ = [
    "ADMISSION_THRESHOLD",
    "REQUIRED_MARKERS",
    "AdmissionResult",
    "FileStorage",
    "IssuancePipeline",
    "IssuanceResult",
    "RecordStore",
    "SigningContext",
    "Submission",
    "SubmissionRecord",
    "SubmissionState",
    "VerificationResult",
    "Verifier",
    "build_record",
    "canonical_payload",
    "check_admission",
    "load_or_create_signing_context",
    "require_admission",
    "sign_payload",
    "sign_record",
    "verify_record",
    "verify_signature",
]
