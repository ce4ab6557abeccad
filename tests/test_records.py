"""Tests for submission record construction."""

import uuid
from datetime import UTC, datetime, timedelta, timezone

import pytest

from wipecert.services.records import (
    SNIPPET_LENGTH,
    SubmissionRecord,
    build_record,
    format_upload_time,
)


class TestFormatUploadTime:
    """Tests for the upload time format."""

    def test_millisecond_precision(self):
        moment = datetime(2026, 1, 2, 3, 4, 5, 678901, tzinfo=UTC)
        assert format_upload_time(moment) == "2026-01-02T03:04:05.678Z"

    def test_zero_milliseconds(self):
        moment = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert format_upload_time(moment) == "2026-01-02T03:04:05.000Z"

    def test_converts_to_utc(self):
        moment = datetime(2026, 1, 2, 5, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_upload_time(moment) == "2026-01-02T03:00:00.000Z"


class TestBuildRecord:
    """Tests for build_record()."""

    def test_fresh_uuid4_ids(self):
        first = build_record(original_name="a.pdf", mime_type="application/pdf", size_bytes=1, text="")
        second = build_record(original_name="a.pdf", mime_type="application/pdf", size_bytes=1, text="")

        assert first.id != second.id
        assert uuid.UUID(first.id).version == 4

    def test_fields(self):
        now = datetime(2026, 3, 1, 12, 0, 0, 250000, tzinfo=UTC)
        record = build_record(
            original_name="wipe.pdf",
            mime_type="application/pdf",
            size_bytes=2048,
            text="Wipe Record",
            now=now,
            record_id="11111111-2222-4333-8444-555555555555",
        )

        assert record.original_name == "wipe.pdf"
        assert record.size_bytes == 2048
        assert record.upload_time == "2026-03-01T12:00:00.250Z"
        assert record.extracted_text_snippet == "Wipe Record"
        assert record.stored_name == "11111111-2222-4333-8444-555555555555.pdf"
        assert record.signature == ""

    def test_snippet_truncated(self):
        text = "x" * (SNIPPET_LENGTH + 100)
        record = build_record(original_name="a.pdf", mime_type="application/pdf", size_bytes=1, text=text)

        assert len(record.extracted_text_snippet) == SNIPPET_LENGTH == 800


class TestSubmissionRecord:
    """Tests for SubmissionRecord helpers."""

    @pytest.fixture
    def record(self) -> SubmissionRecord:
        return SubmissionRecord(
            id="abc",
            original_name="wipe.pdf",
            mime_type="application/pdf",
            size_bytes=10,
            upload_time="2026-01-01T00:00:00.000Z",
        )

    def test_artifact_names(self, record):
        assert record.certificate_name == "abc-certificate.pdf"
        assert record.qr_name == "abc.png"

    def test_with_signature_returns_copy(self, record):
        signed = record.with_signature("c2ln")

        assert signed.signature == "c2ln"
        assert record.signature == ""
        assert signed.id == record.id

    def test_immutable(self, record):
        with pytest.raises(AttributeError):
            record.original_name = "other.pdf"

    def test_to_dict_uses_camel_case(self, record):
        assert record.to_dict() == {
            "id": "abc",
            "originalName": "wipe.pdf",
            "mimeType": "application/pdf",
            "size": 10,
            "uploadTime": "2026-01-01T00:00:00.000Z",
            "extractedTextSnippet": "",
        }
