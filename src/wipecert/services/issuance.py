"""Certificate issuance pipeline.

One submission flows through the stages in order:

    received -> admitted -> certified
             \-> rejected

1. Extract the report text and check the marker phrases (admission).
2. Build the record: fresh id, upload time, text snippet.
3. Sign the canonical payload with the issuer key.
4. Render the certificate PDF and the verification QR code.
5. Retain the original report and persist the record.

Each attempt is all-or-nothing. If any stage after admission fails, every
file written for the submission is removed and the error propagates; the
record is only stored once all of its artifacts exist. Nothing is written
to disk for rejected submissions.

Example:
    pipeline = IssuancePipeline(context, renderer, storage)
    result = await pipeline.issue(submission, RecordStore(session), base_url)
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from wipecert.core.errors import AdmissionRejectedError
from wipecert.services.admission import (
    ADMISSION_THRESHOLD,
    REQUIRED_MARKERS,
    require_admission,
)
from wipecert.services.extraction import extract_text
from wipecert.services.qr import DEFAULT_QR_SIZE, build_verification_url, write_qr_png
from wipecert.services.records import SubmissionRecord, build_record
from wipecert.services.signing import sign_record

if TYPE_CHECKING:
    from pathlib import Path

    from wipecert.services.pdf import CertificateRenderer
    from wipecert.services.signing import SigningContext
    from wipecert.services.storage import FileStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SubmissionState(str, Enum):
    """Lifecycle of one submission."""

    RECEIVED = "received"
    ADMITTED = "admitted"
    REJECTED = "rejected"
    CERTIFIED = "certified"


class RecordWriter(Protocol):
    async def put(self, record: SubmissionRecord) -> None: ...


@dataclass(frozen=True, slots=True)
class Submission:
    """A document handed over by the transport layer.

    Attributes:
        content: Raw document bytes.
        original_name: Filename declared by the submitter.
        mime_type: Declared media type (already checked by the caller).
    """

    content: bytes
    original_name: str
    mime_type: str

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class IssuanceResult:
    """A certified submission and where its artifacts live.

    Attributes:
        record: The stored, signed record.
        verify_url: Public verification URL encoded in the QR code.
        certificate_path: Path of the certificate PDF.
        qr_path: Path of the QR PNG.
    """

    record: SubmissionRecord
    verify_url: str
    certificate_path: Path
    qr_path: Path

    @property
    def id(self) -> str:
        return self.record.id


class IssuancePipeline:
    """Runs submissions through admission, signing, rendering and storage."""

    def __init__(
        self,
        context: SigningContext,
        renderer: CertificateRenderer,
        storage: FileStorage,
        *,
        extract: Callable[[bytes], str] = extract_text,
        markers: Sequence[str] = REQUIRED_MARKERS,
        threshold: int = ADMISSION_THRESHOLD,
        qr_size: int = DEFAULT_QR_SIZE,
    ) -> None:
        """Initialize the pipeline.

        Args:
            context: Issuer key pair.
            renderer: Certificate PDF renderer.
            storage: Artifact and report directories.
            extract: Text extraction function for submitted documents.
            markers: Admission marker phrases.
            threshold: Number of markers required for admission.
            qr_size: Edge length of the QR PNG in pixels.
        """
        self._context = context
        self._renderer = renderer
        self._storage = storage
        self._extract = extract
        self._markers = tuple(markers)
        self._threshold = threshold
        self._qr_size = qr_size

    async def issue(
        self,
        submission: Submission,
        store: RecordWriter,
        base_url: str,
    ) -> IssuanceResult:
        """Certify one submission.

        Args:
            submission: The uploaded document.
            store: Record store the signed record is written to.
            base_url: Public base URL for the verification link.

        Returns:
            IssuanceResult for the certified submission.

        Raises:
            AdmissionRejectedError: The document is not a recognised report.
            KeyUnavailableError: The issuer key cannot sign.
            ArtifactGenerationError: The certificate or QR code failed.
            StoreError: The report or the record could not be stored.
        """
        logger.debug(
            "Submission %s: %s (%d bytes)",
            SubmissionState.RECEIVED.value,
            submission.original_name,
            submission.size_bytes,
        )

        try:
            text = await self._run_sync(self._extract, submission.content)
            admission = require_admission(
                text, submission.original_name, self._markers, self._threshold
            )
        except AdmissionRejectedError:
            logger.info("Submission %s: %s", SubmissionState.REJECTED.value, submission.original_name)
            raise

        record = build_record(
            original_name=submission.original_name,
            mime_type=submission.mime_type,
            size_bytes=submission.size_bytes,
            text=text,
        )
        logger.info(
            "Submission %s as %s (%d/%d markers)",
            SubmissionState.ADMITTED.value,
            record.id,
            admission.matched_count,
            len(self._markers),
        )

        signature = await self._run_sync(sign_record, self._context, record)
        record = record.with_signature(signature)

        verify_url = build_verification_url(base_url, record.id)
        certificate_path = self._storage.artifact_path(record.certificate_name)
        qr_path = self._storage.artifact_path(record.qr_name)

        written: list[Path] = []
        try:
            await self._run_sync(
                self._renderer.write,
                record,
                signature,
                self._context.public_key_pem,
                certificate_path,
            )
            written.append(certificate_path)

            await self._run_sync(write_qr_png, verify_url, qr_path, size=self._qr_size)
            written.append(qr_path)

            written.append(
                await self._run_sync(
                    self._storage.write_report, record.stored_name, submission.content
                )
            )

            await store.put(record)
        except BaseException as e:
            # On cancellation an executor thread may still finish its write
            # after this cleanup; such a file is left orphaned.
            logger.error(
                "Issuance of %s failed (%s); removing %d written file(s)",
                record.id,
                getattr(getattr(e, "kind", None), "value", type(e).__name__),
                len(written),
            )
            self._storage.remove(*written)
            raise

        logger.info("Submission %s: %s", SubmissionState.CERTIFIED.value, record.id)

        return IssuanceResult(
            record=record,
            verify_url=verify_url,
            certificate_path=certificate_path,
            qr_path=qr_path,
        )

    @staticmethod
    async def _run_sync(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run CPU-bound or blocking work in the default thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))
