"""Independent re-verification of issued certificates.

The verifier trusts nothing but the stored record and the issuer public
key: it rebuilds the canonical payload from the stored fields and checks
the stored signature against it. It never writes, so it can be called any
number of times with the same result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from wipecert.core.errors import CertificateNotFoundError
from wipecert.services.signing import canonical_payload, verify_signature

if TYPE_CHECKING:
    from wipecert.services.records import SubmissionRecord
    from wipecert.services.signing import SigningContext

logger = logging.getLogger(__name__)


class RecordReader(Protocol):
    async def get(self, record_id: str) -> SubmissionRecord | None: ...


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Trust result for one certificate id.

    Attributes:
        found: Whether a record exists for the id.
        valid: Whether the stored signature matches the stored record.
        record: The stored record, if found.
        signature: The stored base64 signature, if found.
    """

    found: bool
    valid: bool
    record: SubmissionRecord | None = None
    signature: str | None = None

    @classmethod
    def not_found(cls) -> VerificationResult:
        return cls(found=False, valid=False)


def verify_record(context: SigningContext, record: SubmissionRecord) -> bool:
    """Check a record's own signature against its own fields."""
    return verify_signature(context, canonical_payload(record), record.signature)


class Verifier:
    """Looks up records and checks their signatures."""

    def __init__(self, store: RecordReader, context: SigningContext) -> None:
        self._store = store
        self._context = context

    async def verify(self, record_id: str) -> VerificationResult:
        """Verify the certificate with the given id.

        Returns:
            VerificationResult; ``found`` is False for unknown ids, which is
            never reported as an invalid signature.

        Raises:
            StoreError: If the store cannot be read.
        """
        record = await self._store.get(record_id)
        if record is None:
            logger.warning("Verification requested for unknown id %s", record_id)
            return VerificationResult.not_found()

        valid = verify_record(self._context, record)
        if not valid:
            logger.warning("Signature mismatch for certificate %s", record_id)

        return VerificationResult(
            found=True,
            valid=valid,
            record=record,
            signature=record.signature,
        )

    async def require(self, record_id: str) -> VerificationResult:
        """Like verify(), but raise for unknown ids.

        Raises:
            CertificateNotFoundError: If no record exists for the id.
        """
        result = await self.verify(record_id)
        if not result.found:
            raise CertificateNotFoundError(record_id)
        return result
