"""Shared API key authentication for the upload endpoints.

The key may be sent in the X-API-Key header, as an ``apiKey`` form field
or as an ``apiKey`` query parameter, checked in that order. Comparison is
constant-time. Key values are never logged; only which sources were
present.
"""

from __future__ import annotations

import hmac
import logging
from typing import TYPE_CHECKING, Any

from starlette.requests import Request

from wipecert.api.middleware.errors import AuthenticationError

if TYPE_CHECKING:
    from pydantic import SecretStr

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"
API_KEY_FIELD = "apiKey"

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def extract_api_key(request: Request) -> tuple[str | None, dict[str, bool]]:
    """Find the API key in a request.

    Returns:
        The first key found (header, then form field, then query
        parameter) and a map of which sources carried one.
    """
    header_value = request.headers.get(API_KEY_HEADER) or None

    form_value: str | None = None
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        # Starlette caches the parsed form, so route parameters reuse it
        form = await request.form()
        value: Any = form.get(API_KEY_FIELD)
        if isinstance(value, str) and value:
            form_value = value

    query_value = request.query_params.get(API_KEY_FIELD) or None

    received = {
        "header": header_value is not None,
        "form": form_value is not None,
        "query": query_value is not None,
    }
    return header_value or form_value or query_value, received


def api_key_matches(provided: str | None, expected: SecretStr) -> bool:
    """Constant-time comparison against the configured key."""
    if not provided:
        return False
    return hmac.compare_digest(
        provided.encode("utf-8"),
        expected.get_secret_value().encode("utf-8"),
    )


async def require_api_key(request: Request) -> None:
    """FastAPI dependency: reject requests without the shared API key.

    Raises:
        AuthenticationError: If no key or a wrong key was sent.
    """
    settings = request.app.state.settings
    provided, received = await extract_api_key(request)

    if not api_key_matches(provided, settings.api_key):
        logger.warning(
            "Rejected %s %s: invalid API key (header=%s, form=%s, query=%s)",
            request.method,
            request.url.path,
            received["header"],
            received["form"],
            received["query"],
        )
        raise AuthenticationError("Invalid API key", detail={"received": received})
