"""Durable record store backed by SQLAlchemy.

A record is written in its own transaction and becomes visible to
lookups only once that transaction has committed. Records are never
updated: put() on an existing id fails.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from wipecert.core.errors import StoreError
from wipecert.db.models import CertificateRecord
from wipecert.services.records import SubmissionRecord

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def to_row(record: SubmissionRecord) -> CertificateRecord:
    return CertificateRecord(
        id=record.id,
        original_name=record.original_name,
        stored_name=record.stored_name,
        mime_type=record.mime_type,
        size_bytes=record.size_bytes,
        upload_time=record.upload_time,
        extracted_text_snippet=record.extracted_text_snippet,
        signature=record.signature,
    )


def from_row(row: CertificateRecord) -> SubmissionRecord:
    return SubmissionRecord(
        id=row.id,
        original_name=row.original_name,
        mime_type=row.mime_type,
        size_bytes=row.size_bytes,
        upload_time=row.upload_time,
        extracted_text_snippet=row.extracted_text_snippet,
        stored_name=row.stored_name,
        signature=row.signature,
    )


class RecordStore:
    """put/get access to certificate records over one session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def put(self, record: SubmissionRecord) -> None:
        """Insert and commit a signed record.

        Raises:
            StoreError: If the record is unsigned, the id already exists, or
                the write does not commit.
        """
        if not record.signature:
            raise StoreError(f"Refusing to store unsigned record {record.id}")

        self._session.add(to_row(record))
        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            logger.error("Record %s already exists", record.id)
            raise StoreError(f"Record already exists: {record.id}") from e
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.error("Failed to store record %s: %s", record.id, e)
            raise StoreError(f"Failed to store record: {e}") from e

        logger.debug("Stored record %s", record.id)

    async def get(self, record_id: str) -> SubmissionRecord | None:
        """Look up a record by id.

        Returns:
            The record, or None if no record has that id.

        Raises:
            StoreError: If the lookup itself fails.
        """
        try:
            row = await self._session.get(
                CertificateRecord, record_id, populate_existing=True
            )
        except SQLAlchemyError as e:
            logger.error("Failed to read record %s: %s", record_id, e)
            raise StoreError(f"Failed to read record: {e}") from e

        if row is None:
            return None
        return from_row(row)
