"""Jinja2 template configuration for the HTML pages.

The verification page and its 404 page live in src/wipecert/templates/,
next to the certificate templates under pdf/.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi.templating import Jinja2Templates

from wipecert.services.pdf import format_filesize

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


def get_templates() -> Jinja2Templates:
    """Templates for the HTML pages, with the size formatting filter.

    Raises:
        RuntimeError: If the templates directory does not exist.
    """
    if not TEMPLATES_DIR.exists():
        msg = f"Missing templates directory: {TEMPLATES_DIR}"
        raise RuntimeError(msg)

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["format_filesize"] = format_filesize

    logger.debug("Jinja2 templates configured from %s", TEMPLATES_DIR)
    return templates
