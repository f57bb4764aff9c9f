"""
Structured Logging

Every component logs through structlog so events are machine-readable
key/value records. Logging is configured once, on first use.

CRITICAL: Plaintext passwords and password hashes are never passed to the logger.
"""

import logging
import sys
import threading
from typing import Optional

import structlog

from pfm.config import get_settings


_configured = False
_configure_lock = threading.Lock()


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure structlog and the stdlib root handler.

    Args:
        level: Minimum level name. Defaults to AppSettings.log_level.
    """
    global _configured

    with _configure_lock:
        level_name = level or get_settings().app.log_level

        logging.basicConfig(
            format="%(message)s",
            stream=sys.stderr,
            level=getattr(logging, level_name),
        )
        logging.getLogger("pfm").setLevel(getattr(logging, level_name))

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer()
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _configured = True


def get_logger(name: str):
    """Get a structlog logger, configuring logging on first call."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
