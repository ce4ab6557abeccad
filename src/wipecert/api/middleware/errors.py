"""JSON error bodies for the wipecert HTTP surface.

Every failure reaching a client has the shape::

    {"error": "<code>", "message": "...", "request_id": "...", "detail": {...}}

Two exception families end up here. ``APIError`` subclasses describe
problems with the request itself (missing file, wrong media type, bad key).
``CertificationError`` subclasses come from the issuance and verification
services and carry an ``ErrorKind``; the kind decides the status code.
"""

import logging
from collections.abc import Callable
from typing import Any, ClassVar

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wipecert.api.middleware.request_id import get_request_id
from wipecert.core.errors import CertificationError, ErrorKind

logger = logging.getLogger(__name__)

ERROR_KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.ADMISSION_REJECTED: 400,
    ErrorKind.KEY_UNAVAILABLE: 500,
    ErrorKind.ARTIFACT_FAILURE: 500,
    ErrorKind.STORE_FAILURE: 500,
    ErrorKind.NOT_FOUND: 404,
}

# Codes that are not simply the kind's value
ERROR_KIND_CODE: dict[ErrorKind, str] = {
    ErrorKind.NOT_FOUND: "certificate_not_found",
}


class APIError(Exception):
    """A request-level failure with a fixed code and status.

    Subclasses set ``error`` and ``status_code`` as class attributes and only
    supply the message and optional detail.
    """

    error: ClassVar[str] = "bad_request"
    status_code: ClassVar[int] = 400

    def __init__(self, message: str, detail: dict[str, Any] | None = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)

    def to_response(self) -> JSONResponse:
        return build_error_response(self.error, self.message, self.status_code, self.detail)


class NotFoundError(APIError):
    error = "not_found"
    status_code = 404

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(f"{resource} not found: {identifier}")


class ValidationAPIError(APIError):
    error = "validation_error"


class UnsupportedMediaError(APIError):
    """Only PDF uploads are accepted."""

    error = "unsupported_media_type"

    def __init__(self, media_type: str | None) -> None:
        super().__init__("Only PDF allowed", detail={"media_type": media_type})


class AuthenticationError(APIError):
    error = "unauthorized"
    status_code = 401


def build_error_response(
    error: str,
    message: str,
    status_code: int,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    """Assemble the error body, tagging it with the current request ID."""
    body: dict[str, Any] = {"error": error, "message": message}
    if request_id := get_request_id():
        body["request_id"] = request_id
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def certification_error_response(exc: CertificationError) -> JSONResponse:
    status_code = ERROR_KIND_STATUS.get(exc.kind, 500)
    if status_code >= 500:
        logger.error("Certification failed (%s): %s", exc.kind.value, exc.message)
    code = ERROR_KIND_CODE.get(exc.kind, exc.kind.value)
    return build_error_response(code, exc.message, status_code, exc.detail)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns exceptions escaping a route into JSON error bodies.

    Unknown exceptions are logged with their traceback and reported as a
    generic 500 so internals never leak to the client.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        try:
            return await call_next(request)
        except APIError as exc:
            return exc.to_response()
        except CertificationError as exc:
            return certification_error_response(exc)
        except HTTPException as exc:
            return build_error_response("http_error", str(exc.detail), exc.status_code)
        except ValidationError as exc:
            return build_error_response(
                "validation_error",
                "Request validation failed",
                422,
                {"errors": exc.errors(include_url=False)},
            )
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return build_error_response("internal_error", "An internal error occurred", 500)
