"""Original report download.

Retained reports live outside the static /uploads mount; this route is
the only way to fetch one, and it restores the filename given at upload.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import FileResponse

from wipecert.api.dependencies import Records, Storage
from wipecert.api.middleware.errors import NotFoundError
from wipecert.api.schemas.verify import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/download",
    tags=["download"],
    responses={404: {"description": "Record or report file missing", "model": ErrorResponse}},
)


@router.get("/{record_id}", response_class=FileResponse)
async def download_report(record_id: str, records: Records, storage: Storage) -> FileResponse:
    """Send the original report as an attachment."""
    record = await records.get(record_id)
    if record is None:
        raise NotFoundError("Certificate", record_id)

    path = storage.report_path(record.stored_name)
    if not path.is_file():
        logger.error("Report file missing for certificate %s: %s", record_id, path)
        raise NotFoundError("Report file", record_id)

    return FileResponse(
        path,
        media_type=record.mime_type,
        filename=record.original_name,
    )
