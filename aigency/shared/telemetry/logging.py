"""Logging setup for the service process.

Every record carries the current request id (or "-" outside a request),
set by RequestIDMiddleware through aigency.shared.telemetry.request_context.
"""

import logging
import sys

from aigency.core.config import get_settings
from aigency.shared.telemetry.request_context import get_request_id

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"

# Outbound HTTP libraries log every request at INFO; keep them at WARNING.
_CHATTY_LOGGERS = ("httpx", "httpcore", "google.auth")


class RequestIDFilter(logging.Filter):
    """Attach request_id to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def setup_logging() -> None:
    """Configure root logging once at startup.

    DEBUG when settings.debug is set (dependency resolution then logs every
    unresolved reference), INFO otherwise. Output goes to stdout.
    """
    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[handler],
    )
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return the module logger (pass __name__)."""
    return logging.getLogger(name)
