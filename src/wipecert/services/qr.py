"""Verification QR codes.

Each certificate gets a PNG QR code that encodes its public verification
URL, ``<base_url>/verify/<id>``. The encoder knows nothing about records
or signatures: it is a pure function of the URL.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage

from wipecert.core.errors import ArtifactGenerationError
from wipecert.services.storage import write_atomic

logger = logging.getLogger(__name__)

DEFAULT_QR_SIZE = 300


def build_verification_url(base_url: str, record_id: str) -> str:
    """Verification page URL for a record.

    >>> build_verification_url("https://certs.example.com/", "abc")
    'https://certs.example.com/verify/abc'
    """
    return f"{base_url.rstrip('/')}/verify/{record_id}"


def render_qr_png(url: str, *, size: int = DEFAULT_QR_SIZE) -> bytes:
    """Encode a URL as a square PNG QR code.

    Error correction level Q tolerates roughly a quarter of the symbol
    being damaged or obscured, which suits printed certificates.

    Args:
        url: The URL to encode.
        size: Edge length of the PNG in pixels.

    Returns:
        PNG bytes.

    Raises:
        ArtifactGenerationError: If the URL cannot be encoded.
    """
    if not url:
        raise ArtifactGenerationError("Cannot encode an empty URL", artifact="qr")

    try:
        qr = qrcode.QRCode(error_correction=ERROR_CORRECT_Q, box_size=10, border=4)
        qr.add_data(url)
        qr.make(fit=True)
        image = qr.make_image(image_factory=PilImage).get_image()
        image = image.convert("L").resize((size, size), Image.Resampling.NEAREST)

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
    except (DataOverflowError, ValueError, OSError) as e:
        raise ArtifactGenerationError(
            f"Failed to encode verification QR code: {e}",
            artifact="qr",
            cause=e,
        ) from e

    logger.debug("Encoded QR code (%dpx) for %s", size, url)
    return buffer.getvalue()


def write_qr_png(url: str, destination: Path, *, size: int = DEFAULT_QR_SIZE) -> Path:
    """Encode a URL and write the PNG to ``destination`` atomically.

    Raises:
        ArtifactGenerationError: If encoding or writing fails.
    """
    content = render_qr_png(url, size=size)
    try:
        write_atomic(destination, content)
    except OSError as e:
        raise ArtifactGenerationError(
            f"Failed to write QR code {destination.name}: {e}",
            artifact="qr",
            cause=e,
        ) from e
    return destination
