from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "VIBELIFE_LOG_LEVEL"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def configure_logging(*, level: str | None = None, include_uvicorn: bool = False) -> logging.Logger:
    """Set up root handlers and the ``vibelife`` logger level.

    ``level`` wins over ``VIBELIFE_LOG_LEVEL``; INFO when neither is set.
    """
    resolved = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    logging.basicConfig(level=resolved, format=_FORMAT)

    package_logger = logging.getLogger("vibelife")
    package_logger.setLevel(resolved)
    if include_uvicorn:
        for name in _UVICORN_LOGGERS:
            logging.getLogger(name).setLevel(resolved)
    return package_logger
