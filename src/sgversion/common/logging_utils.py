"""Centralized logging helpers for sgversion.

The command line configures logging once through :func:`configure_logging`;
library modules only ever use ``logging.getLogger(__name__)``. Structured
debug records carry their context through :func:`extra_context` so a JSON
log sink can pick the fields up without changing the call sites.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from ..constants import Constants

_ROOT_LOGGER_NAME = "sgversion"
_CONTEXT_KEYS = ("event", "component", "action", "outcome", "commit", "count", "duration_ms")


class _JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True)


def _level_from_env(default: int = logging.INFO) -> int:
    name = os.environ.get(Constants.LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    value = getattr(logging, name, None)
    return value if isinstance(value, int) else default


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the ``sgversion`` logger hierarchy.

    Args:
        level: Explicit level name; wins over the SGVERSION_LOG_LEVEL environment variable.
        log_file: Optional file sink in addition to the console.

    Returns:
        The configured package root logger.
    """
    resolved = _level_from_env()
    if level:
        candidate = getattr(logging, str(level).upper(), None)
        if isinstance(candidate, int):
            resolved = candidate

    use_json = os.environ.get(Constants.LOG_FORMAT_ENV, "").strip().lower() == "json"
    formatter: logging.Formatter = _JsonFormatter() if use_json else logging.Formatter(Constants.LOG_FORMAT)

    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    logger.setLevel(resolved)
    logger.propagate = False
    # Reset handlers so repeated CLI invocations in one process do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when debug records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping for a structured log record, dropping None values."""
    return {key: value for key, value in fields.items() if value is not None}
