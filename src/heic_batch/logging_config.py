"""Logging configuration for the HEIC batch converter.

All loggers live under the ``heic_batch`` namespace. Worker threads log
through the same handlers, so every diagnostic line carries the thread name
in verbose mode.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

LOGGER_NAMESPACE = "heic_batch"

STANDARD_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
VERBOSE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(message)s"


class PlatformIndependentFormatter(logging.Formatter):
    """Formatter that normalizes line endings to LF on every platform."""

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        return formatted.replace("\r\n", "\n").replace("\r", "\n")


def setup_logging(
    level: int = logging.INFO,
    verbose: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Set up logging for the converter.

    Args:
        level: Base logging level (default: INFO)
        verbose: Enable verbose logging (sets level to DEBUG)
        log_file: Optional path to a log file, appended to

    Returns:
        Configured logger for the heic_batch package
    """
    effective_level = logging.DEBUG if verbose else level

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(effective_level)

    # Repeated setup (tests, re-invoked CLI) must not stack handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(effective_level)

    format_string = VERBOSE_FORMAT if verbose else STANDARD_FORMAT
    formatter = PlatformIndependentFormatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(effective_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
            logger.debug(f"Logging to file: {log_file}")
        except OSError as e:
            logger.warning(f"Failed to set up file logging: {e}")

    logger.debug(
        f"Logging configured: level={logging.getLevelName(effective_level)}, "
        f"verbose={verbose}, log_file={log_file}"
    )

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the heic_batch namespace.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Logger instance for the specified module
    """
    if not name.startswith(LOGGER_NAMESPACE):
        name = f"{LOGGER_NAMESPACE}.{name}"

    return logging.getLogger(name)


def _format_context(context: dict[str, object]) -> str:
    # Paths render as plain strings so log lines stay grep-friendly
    return ", ".join(f"{key}={value}" for key, value in context.items())


def log_operation_start(logger: logging.Logger, operation: str, **context: object) -> None:
    """Log the start of an operation with context.

    Args:
        logger: Logger instance to use
        operation: Name of the operation (e.g., "batch conversion")
        **context: Additional context (e.g., files=12)
    """
    context_str = _format_context(context)
    logger.info(f"Starting {operation}: {context_str}")


def log_operation_complete(
    logger: logging.Logger,
    operation: str,
    success: bool,
    duration: float | None = None,
    **context: object,
) -> None:
    """Log the completion of an operation with context.

    Args:
        logger: Logger instance to use
        operation: Name of the operation
        success: Whether the operation succeeded
        duration: Optional duration in seconds
        **context: Additional context
    """
    context_str = _format_context(context)
    status = "completed successfully" if success else "completed with failures"

    if duration is not None:
        message = f"{operation.capitalize()} {status} in {duration:.2f}s: {context_str}"
    else:
        message = f"{operation.capitalize()} {status}: {context_str}"

    if success:
        logger.info(message)
    else:
        logger.warning(message)


def log_operation_error(
    logger: logging.Logger, operation: str, error: Exception, **context: object
) -> None:
    """Log an operation error with context.

    Args:
        logger: Logger instance to use
        operation: Name of the operation that failed
        error: The exception that occurred
        **context: Additional context
    """
    context_str = _format_context(context)
    logger.error(f"Error during {operation}: {type(error).__name__}: {error} - {context_str}")

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Stack trace for {operation} error:", exc_info=error)
