"""Certificate records.

One row per certified wipe report. Rows are inserted once and never
updated; the signed fields (id, original_name, upload_time) must be read
back byte-for-byte for verification.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wipecert.db.models.base import Base, MediumString, RecordId


class CertificateRecord(Base):
    """Persisted SubmissionRecord."""

    __tablename__ = "certificates"

    id: Mapped[RecordId]
    original_name: Mapped[str] = mapped_column(Text, nullable=False)
    stored_name: Mapped[MediumString]
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # ISO-8601 text, not a DateTime column: the exact string is signed
    upload_time: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    extracted_text_snippet: Mapped[str] = mapped_column(Text, nullable=False, default="")
    signature: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<CertificateRecord id={self.id} original_name={self.original_name!r}>"
