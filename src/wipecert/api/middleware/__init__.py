"""wipecert API middleware components.

This module provides middleware for:
- Request ID tracking for log correlation
- Consistent error response formatting
- API key authentication
"""

from wipecert.api.middleware.auth import (
    api_key_matches,
    extract_api_key,
    require_api_key,
)
from wipecert.api.middleware.errors import (
    APIError,
    AuthenticationError,
    ErrorHandlerMiddleware,
    NotFoundError,
    UnsupportedMediaError,
    ValidationAPIError,
)
from wipecert.api.middleware.request_id import RequestIDMiddleware, get_request_id

__all__ = [
    "APIError",
    "AuthenticationError",
    "ErrorHandlerMiddleware",
    "NotFoundError",
    "RequestIDMiddleware",
    "UnsupportedMediaError",
    "ValidationAPIError",
    "api_key_matches",
    "extract_api_key",
    "get_request_id",
    "require_api_key",
]
