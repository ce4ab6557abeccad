"""Text extraction from submitted PDF reports (pypdf)."""

from __future__ import annotations

import io
import logging

from pypdf import PdfReader

from wipecert.core.errors import AdmissionRejectedError

logger = logging.getLogger(__name__)


def extract_text(data: bytes) -> str:
    """Extract the text of every page, joined with newlines.

    Args:
        data: Raw PDF bytes.

    Returns:
        The concatenated page text (possibly empty for image-only PDFs).

    Raises:
        AdmissionRejectedError: If the bytes are not a readable PDF.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        # Besides PyPdfError, malformed object graphs surface as arbitrary
        # errors (AttributeError, RecursionError, ...) from inside pypdf
        logger.info("Could not parse submitted PDF (%s): %s", type(e).__name__, e)
        raise AdmissionRejectedError(
            "Uploaded file could not be read as a PDF",
            detail={"reason": "unreadable_pdf"},
        ) from e

    return "\n".join(pages)
