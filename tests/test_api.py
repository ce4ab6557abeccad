"""Tests for the wipecert HTTP API.

Tests cover:
- Health check and request IDs
- API key validation (header, form field, query parameter)
- Upload: success, bad key, wrong media type, missing file, rejection
- JSON and HTML verification, including tampering and unknown ids
- Original report download and static artifacts
"""

import pytest
from sqlalchemy import update

from wipecert.db import get_async_session
from wipecert.db.models import CertificateRecord


async def upload(client, pdf: bytes, *, name: str = "wipe.pdf", headers=None, **kwargs):
    return await client.post(
        "/upload",
        files={"report": (name, pdf, "application/pdf")},
        headers=headers,
        **kwargs,
    )


class TestHealth:
    """Tests for the health endpoint and common headers."""

    @pytest.mark.asyncio
    async def test_health(self, api_client):
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True}

    @pytest.mark.asyncio
    async def test_request_id_generated(self, api_client):
        response = await api_client.get("/health")
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_request_id_preserved(self, api_client):
        response = await api_client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestValidateKey:
    """Tests for POST /validate-key."""

    @pytest.mark.asyncio
    async def test_header(self, api_client, auth_headers):
        response = await api_client.post("/validate-key", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"valid": True}

    @pytest.mark.asyncio
    async def test_form_field(self, api_client, api_key):
        response = await api_client.post("/validate-key", data={"apiKey": api_key})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_query_parameter(self, api_client, api_key):
        response = await api_client.post("/validate-key", params={"apiKey": api_key})
        assert response.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("headers", [{}, {"X-API-Key": "wrong"}])
    async def test_invalid(self, api_client, headers):
        response = await api_client.post("/validate-key", headers=headers)

        assert response.status_code == 401
        assert response.json() == {"valid": False, "error": "Invalid API key"}


class TestUpload:
    """Tests for POST /upload."""

    @pytest.mark.asyncio
    async def test_success(self, api_client, auth_headers, wipe_report_pdf, test_settings):
        response = await upload(api_client, wipe_report_pdf, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        record_id = body["id"]
        assert body["success"] is True
        assert body["verifyUrl"] == f"http://test/verify/{record_id}"
        assert body["qrUrl"] == f"http://test/uploads/{record_id}.png"
        assert body["certificateUrl"] == f"http://test/uploads/{record_id}-certificate.pdf"

        artifact_dir = test_settings.storage.artifact_dir
        assert (artifact_dir / f"{record_id}-certificate.pdf").exists()
        assert (artifact_dir / f"{record_id}.png").exists()
        assert (test_settings.storage.report_dir / f"{record_id}.pdf").read_bytes() == wipe_report_pdf

    @pytest.mark.asyncio
    async def test_key_in_form_field(self, api_client, api_key, wipe_report_pdf):
        response = await upload(api_client, wipe_report_pdf, data={"apiKey": api_key})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_key_in_query(self, api_client, api_key, wipe_report_pdf):
        response = await upload(api_client, wipe_report_pdf, params={"apiKey": api_key})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_public_base_url(self, api_client, auth_headers, wipe_report_pdf, test_app):
        test_app.state.settings = test_app.state.settings.model_copy(
            update={"public_base_url": "https://certs.example.com"}
        )

        response = await upload(api_client, wipe_report_pdf, headers=auth_headers)

        body = response.json()
        assert body["verifyUrl"] == f"https://certs.example.com/verify/{body['id']}"

    @pytest.mark.asyncio
    async def test_invalid_key(self, api_client, wipe_report_pdf, test_settings):
        response = await upload(api_client, wipe_report_pdf, headers={"X-API-Key": "wrong"})

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthorized"
        assert body["message"] == "Invalid API key"
        assert body["detail"] == {"received": {"header": True, "form": False, "query": False}}
        assert body["request_id"] == response.headers["X-Request-ID"]
        assert list(test_settings.storage.artifact_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_key(self, api_client, wipe_report_pdf):
        response = await upload(api_client, wipe_report_pdf)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_not_pdf(self, api_client, auth_headers):
        response = await api_client.post(
            "/upload",
            files={"report": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "unsupported_media_type"

    @pytest.mark.asyncio
    async def test_missing_file(self, api_client, auth_headers):
        response = await api_client.post("/upload", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_unrecognized_report(self, api_client, auth_headers, unrelated_pdf, test_settings):
        response = await upload(api_client, unrelated_pdf, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "admission_rejected"
        assert body["message"] == "PDF not recognized as valid wipe-report type"
        assert list(test_settings.storage.artifact_dir.iterdir()) == []
        assert list(test_settings.storage.report_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_malformed_pdf_rejected(
        self, api_client, auth_headers, wipe_report_pdf, monkeypatch, test_settings
    ):
        """Parser crashes on a broken document are a 400, not a 500."""

        def broken_reader(stream):
            raise AttributeError("'NumberObject' object has no attribute 'items'")

        monkeypatch.setattr("wipecert.services.extraction.PdfReader", broken_reader)

        response = await upload(api_client, wipe_report_pdf, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "admission_rejected"
        assert body["detail"] == {"reason": "unreadable_pdf"}
        assert list(test_settings.storage.report_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_delimiter_in_filename(self, api_client, auth_headers, wipe_report_pdf):
        response = await upload(api_client, wipe_report_pdf, name="a|b.pdf", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == {"reason": "invalid_filename"}

    @pytest.mark.asyncio
    async def test_artifacts_served(self, api_client, auth_headers, wipe_report_pdf):
        body = (await upload(api_client, wipe_report_pdf, headers=auth_headers)).json()

        qr = await api_client.get(f"/uploads/{body['id']}.png")
        certificate = await api_client.get(f"/uploads/{body['id']}-certificate.pdf")

        assert qr.status_code == 200
        assert qr.headers["content-type"] == "image/png"
        assert certificate.status_code == 200
        assert certificate.content.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_original_report_not_served_statically(
        self, api_client, auth_headers, wipe_report_pdf
    ):
        body = (await upload(api_client, wipe_report_pdf, headers=auth_headers)).json()

        response = await api_client.get(f"/uploads/{body['id']}.pdf")
        assert response.status_code == 404


class TestVerifyApi:
    """Tests for GET /api/verify/{id}."""

    @pytest.mark.asyncio
    async def test_valid(self, api_client, auth_headers, wipe_report_pdf):
        record_id = (await upload(api_client, wipe_report_pdf, headers=auth_headers)).json()["id"]

        response = await api_client.get(f"/api/verify/{record_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["found"] is True
        assert body["valid"] is True
        assert body["record"]["id"] == record_id
        assert body["record"]["originalName"] == "wipe.pdf"
        assert body["record"]["size"] == len(wipe_report_pdf)
        assert body["record"]["uploadTime"].endswith("Z")
        assert "Wipe Record" in body["record"]["extractedTextSnippet"]
        assert body["signature"]

    @pytest.mark.asyncio
    async def test_idempotent(self, api_client, auth_headers, wipe_report_pdf):
        record_id = (await upload(api_client, wipe_report_pdf, headers=auth_headers)).json()["id"]

        first = await api_client.get(f"/api/verify/{record_id}")
        second = await api_client.get(f"/api/verify/{record_id}")

        assert first.json() == second.json()

    @pytest.mark.asyncio
    async def test_tampered(self, api_client, auth_headers, wipe_report_pdf):
        record_id = (await upload(api_client, wipe_report_pdf, headers=auth_headers)).json()["id"]
        async with get_async_session() as session:
            await session.execute(
                update(CertificateRecord)
                .where(CertificateRecord.id == record_id)
                .values(original_name="forged.pdf")
            )
            await session.commit()

        body = (await api_client.get(f"/api/verify/{record_id}")).json()

        assert body["found"] is True
        assert body["valid"] is False

    @pytest.mark.asyncio
    async def test_not_found(self, api_client):
        response = await api_client.get("/api/verify/00000000-0000-4000-8000-000000000000")

        assert response.status_code == 404
        assert response.json()["error"] == "certificate_not_found"


class TestVerifyPage:
    """Tests for GET /verify/{id}."""

    @pytest.mark.asyncio
    async def test_valid(self, api_client, auth_headers, wipe_report_pdf):
        record_id = (await upload(api_client, wipe_report_pdf, headers=auth_headers)).json()["id"]

        response = await api_client.get(f"/verify/{record_id}")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'data-valid="true"' in response.text
        assert "wipe.pdf" in response.text
        assert f"/download/{record_id}" in response.text
        assert f"/uploads/{record_id}-certificate.pdf" in response.text
        assert "BEGIN PUBLIC KEY" in response.text

    @pytest.mark.asyncio
    async def test_filename_escaped(self, api_client, auth_headers, wipe_report_pdf):
        name = "<img src=x onerror=alert(1)>.pdf"
        record_id = (
            await upload(api_client, wipe_report_pdf, name=name, headers=auth_headers)
        ).json()["id"]

        response = await api_client.get(f"/verify/{record_id}")

        assert "<img src=x onerror" not in response.text
        assert "&lt;img src=x onerror=alert(1)&gt;.pdf" in response.text

    @pytest.mark.asyncio
    async def test_tampered(self, api_client, auth_headers, wipe_report_pdf):
        record_id = (await upload(api_client, wipe_report_pdf, headers=auth_headers)).json()["id"]
        async with get_async_session() as session:
            await session.execute(
                update(CertificateRecord)
                .where(CertificateRecord.id == record_id)
                .values(upload_time="2001-01-01T00:00:00.000Z")
            )
            await session.commit()

        response = await api_client.get(f"/verify/{record_id}")

        assert response.status_code == 200
        assert 'data-valid="false"' in response.text

    @pytest.mark.asyncio
    async def test_not_found(self, api_client):
        response = await api_client.get("/verify/unknown-id")

        assert response.status_code == 404
        assert "Not found" in response.text


class TestDownload:
    """Tests for GET /download/{id}."""

    @pytest.mark.asyncio
    async def test_original_report(self, api_client, auth_headers, wipe_report_pdf):
        record_id = (
            await upload(api_client, wipe_report_pdf, name="disk-7.pdf", headers=auth_headers)
        ).json()["id"]

        response = await api_client.get(f"/download/{record_id}")

        assert response.status_code == 200
        assert response.content == wipe_report_pdf
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="disk-7.pdf"' in response.headers["content-disposition"]

    @pytest.mark.asyncio
    async def test_unknown_id(self, api_client):
        response = await api_client.get("/download/unknown-id")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_missing_file(self, api_client, auth_headers, wipe_report_pdf, test_settings):
        record_id = (await upload(api_client, wipe_report_pdf, headers=auth_headers)).json()["id"]
        (test_settings.storage.report_dir / f"{record_id}.pdf").unlink()

        response = await api_client.get(f"/download/{record_id}")
        assert response.status_code == 404
