"""Content admission check for submitted wipe reports.

A report is admitted when its extracted text contains enough of the
marker phrases printed by the wipe tool. This is a permissive heuristic,
not a parser: documents that merely mention the phrases are accepted.

Example:
    result = check_admission(extract_text(pdf_bytes))
    if not result.accepted:
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from wipecert.core.errors import AdmissionRejectedError
from wipecert.services.signing import PAYLOAD_DELIMITER

logger = logging.getLogger(__name__)

REQUIRED_MARKERS: tuple[str, ...] = ("Wipe Record", "Device", "Wipe Method", "Status")
ADMISSION_THRESHOLD = 3


@dataclass(frozen=True, slots=True)
class AdmissionResult:
    """Outcome of the marker check.

    Attributes:
        accepted: Whether the threshold was reached.
        matched: Markers found in the text, in marker order.
        missing: Markers not found, in marker order.
        threshold: Number of markers required.
    """

    accepted: bool
    matched: tuple[str, ...]
    missing: tuple[str, ...]
    threshold: int

    @property
    def matched_count(self) -> int:
        return len(self.matched)


def check_admission(
    text: str,
    markers: Sequence[str] = REQUIRED_MARKERS,
    threshold: int = ADMISSION_THRESHOLD,
) -> AdmissionResult:
    """Search the text for each marker, ignoring case.

    Args:
        text: Extracted document text.
        markers: Ordered marker phrases.
        threshold: Minimum number of markers for acceptance.

    Returns:
        AdmissionResult describing which markers were found.
    """
    haystack = (text or "").casefold()
    matched: list[str] = []
    missing: list[str] = []
    for marker in markers:
        if marker.casefold() in haystack:
            matched.append(marker)
        else:
            missing.append(marker)

    return AdmissionResult(
        accepted=len(matched) >= threshold,
        matched=tuple(matched),
        missing=tuple(missing),
        threshold=threshold,
    )


def require_admission(
    text: str,
    original_name: str,
    markers: Sequence[str] = REQUIRED_MARKERS,
    threshold: int = ADMISSION_THRESHOLD,
) -> AdmissionResult:
    """Admit a submission or raise.

    Filenames containing the signed payload delimiter are refused, since
    the payload could no longer be split back into its fields.

    Raises:
        AdmissionRejectedError: If the filename is unusable or too few
            markers were found.
    """
    if PAYLOAD_DELIMITER in original_name:
        logger.info("Rejected submission: filename contains %r", PAYLOAD_DELIMITER)
        raise AdmissionRejectedError(
            f"Filename must not contain the character {PAYLOAD_DELIMITER!r}",
            detail={"reason": "invalid_filename"},
        )

    result = check_admission(text, markers, threshold)
    if not result.accepted:
        logger.info(
            "Rejected submission: %d/%d markers matched (threshold %d)",
            result.matched_count,
            len(markers),
            threshold,
        )
        raise AdmissionRejectedError(
            "PDF not recognized as valid wipe-report type",
            detail={
                "reason": "markers_missing",
                "matched": list(result.matched),
                "missing": list(result.missing),
                "threshold": threshold,
            },
        )

    logger.debug(
        "Admitted submission: %d/%d markers matched",
        result.matched_count,
        len(markers),
    )
    return result
