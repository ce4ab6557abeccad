"""wipecert API routers.

- upload: report certification and API key check (API key gated)
- verify: JSON re-verification of certificates (public)
- pages: HTML verification page (public)
- download: original report download (public)
"""

from wipecert.api.routers.download import router as download_router
from wipecert.api.routers.pages import router as pages_router
from wipecert.api.routers.upload import router as upload_router
from wipecert.api.routers.verify import router as verify_router

__all__ = [
    "download_router",
    "pages_router",
    "upload_router",
    "verify_router",
]
