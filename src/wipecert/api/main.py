"""wipecert API service entry point.

This module provides the application instance for ASGI servers (uvicorn)
and a run() function for direct execution.

The app is created using the factory pattern from wipecert.api.create_app().
"""

import logging

from wipecert.api import create_app
from wipecert.core.settings import get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# This is what uvicorn references: wipecert.api.main:app
app = create_app()


def run() -> None:
    """Run the API server using uvicorn.

    This function is called by the wipecert-api console script
    defined in pyproject.toml.
    """
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    logger.info("Starting wipecert API on %s:%d", settings.api_host, settings.api_port)

    uvicorn.run(
        "wipecert.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
