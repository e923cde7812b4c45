"""
JSON logging for the rentflow session core.

Every record goes to stdout as one JSON object. Call sites tag records
with a ``step`` field through ``extra`` (``stage_transition``,
``gateway_request``, ``stale_response`` ...), so a session can be followed
by filtering on it.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from rentflow.config import get_settings

LOGGER_NAME = "rentflow"

# Libraries whose INFO chatter drowns out the session's own records.
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _resolve_level(log_level: Optional[str]) -> int:
    name = log_level if log_level is not None else get_settings().log_level
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_level: Optional[str] = None) -> logging.Logger:
    """Attach the JSON stdout handler to the ``rentflow`` logger.

    Args:
        log_level: Level name; defaults to ``LOG_LEVEL`` from settings.
            Unknown names fall back to INFO.

    Calling it again only adjusts the level, so dev-server reloads do not
    stack handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_resolve_level(log_level))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JsonFormatter(
                "%(asctime)s %(levelname)s %(name)s %(message)s",
                rename_fields={"asctime": "timestamp", "levelname": "level"},
                datefmt="%Y-%m-%dT%H:%M:%SZ",
            )
        )
        logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
