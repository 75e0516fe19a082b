"""Application logging.

Two JSON-lines files plus an optional console stream:

- ``error.log``    -- ERROR and above
- ``combined.log`` -- everything at the configured level and above
- console          -- ``LEVEL: message``, skipped in production

Every mec module logs under the ``mec`` namespace (``mec.server``,
``mec.file_router``, ...) so a single ``configure_logging()`` call
captures the whole framework plus the application logger.
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from mec.config import AppConfig

ROOT_LOGGER = "mec"
APP_LOGGER = "mec.app"

# Marker attribute so repeated configuration replaces our handlers only
_HANDLER_MARK = "_mec_handler"


class JSONFormatter(logging.Formatter):
    """Format records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: AppConfig) -> logging.Logger:
    """Attach file and console handlers to the ``mec`` logger.

    Idempotent: handlers installed by a previous call are removed first.
    Returns the application logger (``mec.app``).
    """
    root = logging.getLogger(ROOT_LOGGER)
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)
            handler.close()

    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    error_handler = logging.FileHandler(log_dir / "error.log", encoding="utf-8", delay=True)
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(JSONFormatter())
    _install(root, error_handler)

    combined_handler = logging.FileHandler(log_dir / "combined.log", encoding="utf-8", delay=True)
    combined_handler.setLevel(level)
    combined_handler.setFormatter(JSONFormatter())
    _install(root, combined_handler)

    console = config.log_console if config.log_console is not None else not config.production
    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(level)
        stream_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        _install(root, stream_handler)

    return logging.getLogger(APP_LOGGER)


def _install(root: logging.Logger, handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_MARK, True)
    root.addHandler(handler)
