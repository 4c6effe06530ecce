"""Structured logging configuration.

Configures the root logger with a structured format including timestamp,
level, and module name.  The log level is controlled by ``settings.LOG_LEVEL``.
"""

import logging
import sys

from hr_assistant.core.config import settings


def setup_logging() -> None:
    """Configure structured logging for the application.

    Sets the root logger level from ``settings.LOG_LEVEL`` and installs a
    single ``StreamHandler`` writing to *stdout*.  Safe to call repeatedly.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    # Reduce noise from third-party libraries
    for noisy in ("httpx", "httpcore", "hpack", "apscheduler", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
