"""Submission records.

A SubmissionRecord is created once per admitted report and never changes
afterwards. Its id, original_name and upload_time are the signed fields.
"""

from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

SNIPPET_LENGTH = 800


def format_upload_time(moment: datetime) -> str:
    """Format a moment as ISO-8601 UTC with millisecond precision.

    >>> format_upload_time(datetime(2026, 1, 2, 3, 4, 5, 678901, tzinfo=UTC))
    '2026-01-02T03:04:05.678Z'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


@dataclass(frozen=True, slots=True)
class SubmissionRecord:
    """Metadata of one certified wipe report.

    Attributes:
        id: UUID4 string, primary key and verification URL segment.
        original_name: Filename declared by the submitter.
        mime_type: Declared media type.
        size_bytes: Size of the submitted document.
        upload_time: ISO-8601 UTC creation time.
        extracted_text_snippet: First characters of the extracted text.
        stored_name: File name of the retained report in the report directory.
        signature: Base64 signature over the canonical payload.
    """

    id: str
    original_name: str
    mime_type: str
    size_bytes: int
    upload_time: str
    extracted_text_snippet: str = ""
    stored_name: str = ""
    signature: str = ""

    @property
    def certificate_name(self) -> str:
        return f"{self.id}-certificate.pdf"

    @property
    def qr_name(self) -> str:
        return f"{self.id}.png"

    def with_signature(self, signature: str) -> SubmissionRecord:
        """Return a copy carrying the given signature."""
        return dataclasses.replace(self, signature=signature)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "originalName": self.original_name,
            "mimeType": self.mime_type,
            "size": self.size_bytes,
            "uploadTime": self.upload_time,
            "extractedTextSnippet": self.extracted_text_snippet,
        }


def build_record(
    *,
    original_name: str,
    mime_type: str,
    size_bytes: int,
    text: str,
    stored_name: str | None = None,
    now: datetime | None = None,
    record_id: str | None = None,
) -> SubmissionRecord:
    """Assemble an unsigned record for an admitted submission.

    Args:
        original_name: Filename declared by the submitter.
        mime_type: Declared media type.
        size_bytes: Size of the submitted document.
        text: Full extracted text; only a snippet is kept.
        stored_name: Name under which the report will be retained
            (defaults to "<id>.pdf").
        now: Creation time override (defaults to the current UTC time).
        record_id: Identifier override (defaults to a fresh UUID4).

    Returns:
        A new SubmissionRecord with an empty signature.
    """
    record_id = record_id or str(uuid.uuid4())
    return SubmissionRecord(
        id=record_id,
        original_name=original_name,
        mime_type=mime_type,
        size_bytes=size_bytes,
        upload_time=format_upload_time(now or datetime.now(UTC)),
        extracted_text_snippet=(text or "")[:SNIPPET_LENGTH],
        stored_name=stored_name or f"{record_id}.pdf",
    )
