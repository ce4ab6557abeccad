"""Process-wide settings accessor.

``get_settings()`` builds ``Settings`` from the environment once and keeps
it. A configuration that does not validate stops the process: there is no
sensible way to issue certificates with a half-read configuration.

Tests call ``clear_settings_cache()`` after changing the environment.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import ValidationError

from wipecert.core.config import ConfigValidationError, Settings, validate_settings

logger = logging.getLogger(__name__)


def _describe(exc: ValidationError) -> str:
    return "\n".join(
        f"  - {'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached settings, loading them on first use.

    Raises:
        SystemExit: When the environment holds an invalid configuration.
    """
    try:
        settings = Settings()
        validate_settings(settings)
    except ValidationError as exc:
        logger.critical("Invalid configuration:\n%s", _describe(exc))
        raise SystemExit(1) from exc
    except ConfigValidationError as exc:
        logger.critical("Invalid configuration for %s: %s", exc.field or "?", exc.message)
        raise SystemExit(1) from exc

    logger.info(
        "Settings loaded (environment=%s, artifacts=%s, policy=%s)",
        settings.environment.value,
        settings.storage.artifact_dir,
        settings.get_policy_hash()[:16],
    )
    return settings


def clear_settings_cache() -> None:
    get_settings.cache_clear()


def get_settings_safe() -> Settings | None:
    """Like ``get_settings()`` but returns None instead of exiting."""
    try:
        return get_settings()
    except SystemExit:
        return None
