"""
Loguru setup for Harbour.

``settings.py`` calls :func:`initialize_logging` once, with values it already
read through django-environ. Request lines written by
``core.middleware.RequestLoggingMiddleware`` are bound with ``access_log=True``
and land in their own file; everything from Django's stdlib loggers is
forwarded into Loguru by :class:`InterceptHandler`.
"""

import logging
import sys
from pathlib import Path

from loguru import logger

# Keys bound by the request middleware. Defaults keep formats valid for
# records logged outside a request (management commands, the job sync).
REQUEST_EXTRA = {
    "request_id": "-",
    "user": "anonymous",
    "method": "-",
    "path": "-",
    "status": "-",
    "duration": "-",
    "access_log": False,
}

# Third-party loggers that only matter when something goes wrong
QUIET_LOGGERS = (
    "django.db.backends",
    "django.template",
    "django.utils.autoreload",
    "urllib3",
    "requests",
    "PIL",
    "MARKDOWN",
    "posthog",
)

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> <level>{level: <7}</level> "
    "<cyan>{name}:{line}</cyan> {message}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} {level: <7} [{extra[request_id]}] {name}:{line} {message}"
ACCESS_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} [{extra[request_id]}] {extra[user]} "
    '"{extra[method]} {extra[path]}" {extra[status]} {extra[duration]}ms'
)


def _is_access(record):
    return record["extra"].get("access_log", False)


def _not_access(record):
    return not _is_access(record)


def configure_logging(debug=True, level=None, log_dir=None):
    """
    Replace Loguru's default sink with Harbour's.

    The console sink follows ``level`` in debug and only shows warnings in
    production. ``harbour.log`` and ``harbour.json`` hold application
    records, ``errors.log`` keeps errors longer, ``access.log`` gets one line
    per request. When ``log_dir`` is empty only the console sink is
    installed, which is what the test settings want.
    """
    level = level or ("DEBUG" if debug else "INFO")

    logger.remove()
    logger.configure(extra=REQUEST_EXTRA)

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT if debug else FILE_FORMAT,
        level=level if debug else "WARNING",
        colorize=debug,
        backtrace=debug,
        diagnose=debug,
        filter=_not_access,
    )

    if not log_dir:
        return logger

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_dir / "harbour.log",
        format=FILE_FORMAT,
        level=level,
        rotation="20 MB",
        retention="14 days",
        compression="zip",
        enqueue=True,
        filter=_not_access,
    )
    logger.add(
        log_dir / "errors.log",
        format=FILE_FORMAT,
        level="ERROR",
        rotation="10 MB",
        retention="60 days",
        compression="zip",
        enqueue=True,
        backtrace=True,
    )
    # JSON lines for shipping to a log aggregator
    logger.add(
        log_dir / "harbour.json",
        serialize=True,
        level="INFO",
        rotation="50 MB",
        retention="7 days",
        compression="zip",
        enqueue=True,
        filter=_not_access,
    )
    logger.add(
        log_dir / "access.log",
        format=ACCESS_FORMAT,
        level="INFO",
        rotation="50 MB",
        retention="30 days",
        compression="zip",
        enqueue=True,
        filter=_is_access,
    )

    logger.debug("Logging to {}", log_dir)
    return logger


class InterceptHandler(logging.Handler):
    """Send stdlib ``logging`` records to Loguru, keeping the caller's location."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def intercept_stdlib_logging():
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_configured = False


def initialize_logging(debug=True, level=None, log_dir=None):
    """Configure sinks and the stdlib bridge the first time it is called."""
    global _configured
    if _configured:
        return
    configure_logging(debug=debug, level=level, log_dir=log_dir)
    intercept_stdlib_logging()
    _configured = True
