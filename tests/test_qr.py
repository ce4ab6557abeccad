"""Tests for verification QR codes."""

import io

import pytest
from PIL import Image

from wipecert.core.errors import ArtifactGenerationError
from wipecert.services.qr import build_verification_url, render_qr_png, write_qr_png


class TestVerificationUrl:
    """Tests for build_verification_url()."""

    @pytest.mark.parametrize(
        "base_url",
        ["https://certs.example.com", "https://certs.example.com/"],
    )
    def test_joins_path(self, base_url):
        assert build_verification_url(base_url, "abc") == "https://certs.example.com/verify/abc"


class TestRenderQr:
    """Tests for render_qr_png()."""

    def test_png_of_requested_size(self):
        content = render_qr_png("http://localhost:3000/verify/abc")
        image = Image.open(io.BytesIO(content))

        assert image.format == "PNG"
        assert image.size == (300, 300)

    def test_custom_size(self):
        image = Image.open(io.BytesIO(render_qr_png("http://x/verify/1", size=150)))
        assert image.size == (150, 150)

    def test_pure_function_of_url(self):
        assert render_qr_png("http://x/verify/1") == render_qr_png("http://x/verify/1")
        assert render_qr_png("http://x/verify/1") != render_qr_png("http://x/verify/2")

    def test_empty_url_rejected(self):
        with pytest.raises(ArtifactGenerationError) as exc_info:
            render_qr_png("")
        assert exc_info.value.artifact == "qr"

    def test_oversized_payload_rejected(self):
        with pytest.raises(ArtifactGenerationError):
            render_qr_png("http://x/" + "a" * 5000)


class TestWriteQr:
    """Tests for write_qr_png()."""

    def test_writes_file(self, tmp_path):
        destination = tmp_path / "abc.png"
        path = write_qr_png("http://x/verify/abc", destination)

        assert path == destination
        assert destination.read_bytes().startswith(b"\x89PNG")

    def test_unwritable_destination(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")

        with pytest.raises(ArtifactGenerationError):
            write_qr_png("http://x/verify/abc", blocker / "abc.png")
