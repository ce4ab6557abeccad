"""Local file storage for certificate artifacts and retained reports.

Two directories are managed:
- the artifact directory, holding ``<id>-certificate.pdf`` and ``<id>.png``
  files, which is exposed read-only by the static file server at /uploads;
- the report directory, holding the original uploaded reports, which is
  only reachable through the download endpoint.

All writes go through a temporary sibling file renamed into place, so a
reader never sees a partially written file.

Example:
    storage = FileStorage.from_settings(settings.storage)
    storage.ensure_directories()
    path = storage.write_report(record.stored_name, pdf_bytes)
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from wipecert.core.errors import StoreError

if TYPE_CHECKING:
    from wipecert.core.config import StorageSettings

logger = logging.getLogger(__name__)


def write_atomic(destination: Path, content: bytes) -> None:
    """Write bytes through a temporary sibling file and rename into place.

    Raises:
        OSError: If the file cannot be written. No file is left at
            ``destination`` and the temporary file is removed.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=destination.parent,
        prefix=f".{destination.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, destination)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _safe_name(name: str) -> str:
    """Reject names that would escape the storage directory."""
    if not name or name != Path(name).name or name in {".", ".."}:
        msg = f"Invalid storage file name: {name!r}"
        raise ValueError(msg)
    return name


class FileStorage:
    """Artifact and report directories on the local filesystem."""

    def __init__(self, artifact_dir: Path | str, report_dir: Path | str) -> None:
        self._artifact_dir = Path(artifact_dir)
        self._report_dir = Path(report_dir)

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> FileStorage:
        """Create storage from StorageSettings configuration."""
        return cls(artifact_dir=settings.artifact_dir, report_dir=settings.report_dir)

    @property
    def artifact_dir(self) -> Path:
        return self._artifact_dir

    @property
    def report_dir(self) -> Path:
        return self._report_dir

    def ensure_directories(self) -> None:
        """Create the storage directories if missing."""
        for directory in (self._artifact_dir, self._report_dir):
            directory.mkdir(parents=True, exist_ok=True)
        logger.info(
            "Storage directories ready: artifacts=%s, reports=%s",
            self._artifact_dir,
            self._report_dir,
        )

    def artifact_path(self, name: str) -> Path:
        return self._artifact_dir / _safe_name(name)

    def report_path(self, name: str) -> Path:
        return self._report_dir / _safe_name(name)

    def write_report(self, name: str, content: bytes) -> Path:
        """Retain an original report.

        Raises:
            StoreError: If the report cannot be written.
        """
        path = self.report_path(name)
        try:
            write_atomic(path, content)
        except OSError as e:
            logger.error("Failed to retain report %s: %s", name, e)
            raise StoreError(f"Failed to store report file: {e}") from e
        return path

    def read_report(self, name: str) -> bytes | None:
        """Return a retained report, or None if it is missing."""
        path = self.report_path(name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def remove(self, *paths: Path) -> None:
        """Delete files written for a submission that did not complete.

        Missing files are ignored; other failures are logged, since the
        caller is already propagating the original error.
        """
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.error("Failed to remove %s during cleanup: %s", path, e)
