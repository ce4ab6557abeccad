"""Certificate PDF generation using WeasyPrint.

Certificates are rendered from a Jinja2 HTML template with a PDF-specific
stylesheet. The first page carries the record metadata, the attestation
statement and the signature; the second page carries the issuer public key
so a reader can verify the certificate offline.

Example:
    from wipecert.services.pdf import CertificateRenderer

    renderer = CertificateRenderer(issuer_name="Wipe-Certs System")
    renderer.write(record, record.signature, context.public_key_pem, path)
"""

from __future__ import annotations

import logging
import textwrap
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from weasyprint import CSS, HTML

from wipecert.core.errors import ArtifactGenerationError
from wipecert.services.storage import write_atomic

if TYPE_CHECKING:
    from wipecert.services.records import SubmissionRecord

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).parent.parent / "templates" / "pdf"
DEFAULT_CSS_PATH = DEFAULT_TEMPLATE_DIR / "styles.css"
CERTIFICATE_TEMPLATE = "certificate.html"

ATTESTATION_STATEMENT = (
    "This certificate attests that the uploaded wipe report indicates a completed "
    "data wipe. The signature below cryptographically signs the certificate "
    "metadata for verification."
)

# Characters per line when printing the base64 signature
SIGNATURE_LINE_WIDTH = 64


@dataclass(frozen=True)
class PDFResult:
    """Result of a PDF generation operation.

    Attributes:
        content: The generated PDF as bytes.
        page_count: Number of pages in the generated PDF.
        template_name: Name of the template used.
        generated_at: Timestamp of generation (ISO 8601).
    """

    content: bytes
    page_count: int
    template_name: str
    generated_at: str


def wrap_signature(signature: str, width: int = SIGNATURE_LINE_WIDTH) -> list[str]:
    """Split a base64 signature into fixed-width lines."""
    return textwrap.wrap(signature, width) if signature else []


def format_filesize(size: int) -> str:
    """Format a byte count, e.g. ``1536 -> "1,536 bytes (1.5 KB)"``."""
    exact = f"{size:,} bytes"
    if size < 1024:
        return exact
    value = float(size)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024 or unit == "GB":
            return f"{exact} ({value:.1f} {unit})"
    return exact


class CertificateRenderer:
    """Renders certificate PDFs with WeasyPrint and Jinja2 templates.

    Create one instance and reuse it; the template environment and the
    stylesheet are loaded once.
    """

    def __init__(
        self,
        template_dir: Path | str | None = None,
        css_path: Path | str | None = None,
        *,
        issuer_name: str = "Wipe-Certs System",
    ) -> None:
        """Initialize the renderer.

        Args:
            template_dir: Directory containing the certificate template.
                Defaults to the built-in templates/pdf directory.
            css_path: Path to the PDF stylesheet. Defaults to the built-in
                styles.css.
            issuer_name: Issuer printed in the "Signed by" line.
        """
        self._template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
        self._css_path = Path(css_path) if css_path else DEFAULT_CSS_PATH
        self._issuer_name = issuer_name
        self._base_url = f"file://{self._template_dir}/"

        self._env = Environment(
            loader=FileSystemLoader(str(self._template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )
        self._env.filters["format_filesize"] = format_filesize

        self._css: CSS | None = None
        if self._css_path.exists():
            self._css = CSS(filename=str(self._css_path))

        logger.debug("Initialized CertificateRenderer: template_dir=%s", self._template_dir)

    @property
    def issuer_name(self) -> str:
        return self._issuer_name

    def build_context(
        self,
        record: SubmissionRecord,
        signature: str,
        public_key_pem: str,
    ) -> dict[str, Any]:
        """Template variables for one certificate."""
        return {
            "certificate_id": record.id,
            "original_name": record.original_name,
            "upload_time": record.upload_time,
            "size_bytes": record.size_bytes,
            "issuer_name": self._issuer_name,
            "statement": ATTESTATION_STATEMENT,
            "signature_lines": wrap_signature(signature),
            "public_key_pem": public_key_pem.strip(),
            "generated_at": datetime.now(UTC).isoformat(),
        }

    def render(
        self,
        record: SubmissionRecord,
        signature: str,
        public_key_pem: str,
    ) -> PDFResult:
        """Render a certificate to PDF bytes.

        Raises:
            ArtifactGenerationError: If the template is missing or rendering fails.
        """
        context = self.build_context(record, signature, public_key_pem)

        try:
            template = self._env.get_template(CERTIFICATE_TEMPLATE)
            html_content = template.render(**context)
        except TemplateNotFound as e:
            raise ArtifactGenerationError(
                f"Template not found: {CERTIFICATE_TEMPLATE}",
                artifact="certificate",
                cause=e,
            ) from e
        except Exception as e:
            raise ArtifactGenerationError(
                f"Failed to render certificate template: {e}",
                artifact="certificate",
                cause=e,
            ) from e

        try:
            stylesheets = [self._css] if self._css else None
            document = HTML(string=html_content, base_url=self._base_url).render(
                stylesheets=stylesheets
            )
            pdf_bytes = document.write_pdf()
        except Exception as e:
            raise ArtifactGenerationError(
                f"Failed to generate certificate PDF: {e}",
                artifact="certificate",
                cause=e,
            ) from e

        logger.debug(
            "Generated certificate PDF for id=%s, pages=%d, bytes=%d",
            record.id,
            len(document.pages),
            len(pdf_bytes),
        )

        return PDFResult(
            content=pdf_bytes,
            page_count=len(document.pages),
            template_name=CERTIFICATE_TEMPLATE,
            generated_at=context["generated_at"],
        )

    def write(
        self,
        record: SubmissionRecord,
        signature: str,
        public_key_pem: str,
        destination: Path,
    ) -> Path:
        """Render a certificate and write it to ``destination``.

        The file appears at ``destination`` only once it is complete.

        Raises:
            ArtifactGenerationError: If rendering or writing fails; no file
                is left at ``destination`` in that case.
        """
        result = self.render(record, signature, public_key_pem)
        try:
            write_atomic(destination, result.content)
        except OSError as e:
            raise ArtifactGenerationError(
                f"Failed to write certificate {destination.name}: {e}",
                artifact="certificate",
                cause=e,
            ) from e
        return destination

