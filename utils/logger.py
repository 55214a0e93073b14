"""
utils/logger.py
---------------
Centralized logging configuration.
All modules should use `get_logger(__name__)` to obtain a logger instance.

Connection strings can end up in log lines (driver errors, remediation
text), so the shared handler masks the password part of any
``postgres://`` / ``postgresql://`` URL before it is written.
"""

import logging
import re
import sys

from config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DSN_PASSWORD_RE = re.compile(r"(postgres(?:ql)?://[^:/@\s]+:)[^@\s]+@")
_initialized = False


def redact_dsn(text: str) -> str:
    """Replace the password in every PostgreSQL URL inside ``text`` with ***."""
    return _DSN_PASSWORD_RE.sub(r"\1***@", text)


class DsnRedactingFilter(logging.Filter):
    """Masks database passwords in the fully formatted message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_dsn(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _init_logging() -> None:
    global _initialized
    if _initialized:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    handler.addFilter(DsnRedactingFilter())
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root.addHandler(handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger for a data-layer, repository or service module.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A logging.Logger writing through the shared, redacting stdout handler.
    """
    _init_logging()
    return logging.getLogger(name)
