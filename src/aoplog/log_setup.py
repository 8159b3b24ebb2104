"""Structured log sink setup.

:func:`configure_logging` attaches a daily rolling file handler (and an
optional stderr echo) to the call logger used by
:class:`~aoplog.interceptors.LoggingInterceptor`. Handlers installed here
are tagged so a second call replaces them instead of stacking duplicates.
"""

import logging
import logging.handlers
import sys
from typing import Optional

from .config import LoggingSettings
from .constants import CALLS_LOGGER_NAME, LOGGER

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

_MANAGED = "_aoplog_managed"


def _managed(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _MANAGED, True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def close_logging(logger: Optional[logging.Logger] = None) -> None:
    """Detach and close the handlers installed by :func:`configure_logging`."""
    target = logger or logging.getLogger(CALLS_LOGGER_NAME)
    for h in list(target.handlers):
        if getattr(h, _MANAGED, False):
            target.removeHandler(h)
            h.close()


def configure_logging(settings: Optional[LoggingSettings] = None, *, name: str = CALLS_LOGGER_NAME) -> logging.Logger:
    """Configure and return the call logger.

    Args:
        settings: Sink settings; defaults to :class:`LoggingSettings()`.
        name: Logger name to configure.
    """
    settings = settings or LoggingSettings()
    logger = logging.getLogger(name)
    close_logging(logger)
    logger.setLevel(settings.level_no)

    if settings.log_file:
        logger.addHandler(
            _managed(
                logging.handlers.TimedRotatingFileHandler(
                    settings.log_file,
                    when=settings.when,
                    backupCount=settings.backup_count,
                    encoding="utf-8",
                    delay=True,
                )
            )
        )
    if settings.console:
        logger.addHandler(_managed(logging.StreamHandler(sys.stderr)))

    LOGGER.debug(
        "Call log '%s' configured: file=%r level=%s when=%s console=%s",
        name,
        settings.log_file,
        settings.level,
        settings.when,
        settings.console,
    )
    return logger
