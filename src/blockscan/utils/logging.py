"""
Logging setup for blockscan.

Every module logs through a child of the ``blockscan`` logger. Console
output goes to stderr so that ``blockscan results --json`` can be piped.
Worker messages carry the job they belong to via get_logger_with_context.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blockscan.config.settings import LoggingSettings


ROOT_LOGGER_NAME = "blockscan"

_logging_configured = False


def setup_logging(settings: "LoggingSettings | None" = None) -> logging.Logger:
    """
    Attach console and/or rotating file handlers to the blockscan logger.

    Only the first call has an effect; later calls return the already
    configured logger.

    Args:
        settings: Logging configuration. None uses LoggingSettings defaults.

    Returns:
        The ``blockscan`` logger
    """
    global _logging_configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if _logging_configured:
        return logger

    if settings is None:
        from blockscan.config.settings import LoggingSettings

        settings = LoggingSettings()

    level = getattr(logging, settings.level)
    formatter = logging.Formatter(fmt=settings.format, datefmt=settings.date_format)

    logger.handlers.clear()
    logger.setLevel(level)

    handlers: list[logging.Handler] = []
    if settings.log_to_console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if settings.file_path is not None:
        settings.file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=str(settings.file_path),
            maxBytes=settings.max_file_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        ))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Handlers live on the blockscan logger only
    logger.propagate = False

    _logging_configured = True
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger under the ``blockscan`` hierarchy.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Worker started")
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)

    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Close and remove the handlers added by setup_logging."""
    global _logging_configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    _logging_configured = False


class JobLoggerAdapter(logging.LoggerAdapter):
    """
    Appends the job's context to every message.

    Example:
        >>> logger = get_logger_with_context(__name__, scan_id="V1StGXR8_Z5jdHi6")
        >>> logger.info("Job popped")  # "Job popped [scan_id=V1StGXR8_Z5jdHi6]"
    """

    def process(self, msg, kwargs):
        if self.extra:
            context = " ".join(f"[{key}={value}]" for key, value in self.extra.items())
            msg = f"{msg} {context}"
        return msg, kwargs


def get_logger_with_context(name: str | None = None, **context: str) -> JobLoggerAdapter:
    """Logger for one job; context is typically scan_id and url."""
    return JobLoggerAdapter(get_logger(name), context)
