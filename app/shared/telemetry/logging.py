"""Logging configuration for the application."""

import logging
import sys

from app.core.config import get_settings
from app.shared.context import get_context
from app.shared.telemetry.tracing import get_trace_id

# Chatty client libraries: per-request lines only in debug.
_QUIET_LOGGERS = ("httpx", "httpcore")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s trace=%(trace_id)s] %(message)s"


class RequestContextFilter(logging.Filter):
    """Attach request, correlation, user and trace ids to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_context()
        record.request_id = ctx.request_id or "-"
        record.correlation_id = ctx.correlation_id or "-"
        record.user_id = ctx.user_id or "-"
        record.trace_id = get_trace_id() or "-"
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout with the request id of the current request.
    HTTP client loggers are raised to WARNING outside debug so upstream
    calls do not flood the log.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[handler],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(log_level if settings.debug else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
