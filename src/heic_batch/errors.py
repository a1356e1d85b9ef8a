"""Error definitions for the HEIC batch converter."""

import logging
import traceback
from enum import Enum
from pathlib import Path
from typing import Any

from .logging_config import get_logger
from .models import ConversionResult, ConversionStatus


class ConversionError(Exception):
    """Base exception for conversion errors."""

    pass


class InputNotFoundError(ConversionError):
    """Raised when the input file or directory does not exist."""

    pass


class TraversalError(ConversionError):
    """Raised when walking the input directory fails."""

    pass


class ContextCreationError(ConversionError):
    """Raised when the codec cannot create a decoding context."""

    pass


class DecodeError(ConversionError):
    """Raised when reading, locating or decoding the primary image fails."""

    pass


class UnsupportedFormatError(ConversionError):
    """Raised when the requested output format is not supported."""

    pass


class EncodeError(ConversionError):
    """Raised when the raster encoder fails."""

    pass


class WriteError(ConversionError):
    """Raised when the encoded output cannot be written."""

    pass


class DeleteError(ConversionError):
    """Raised when the source file cannot be removed."""

    pass


class ErrorCategory(Enum):
    """Categories of errors for classification."""

    INPUT = "input"
    DECODE = "decode"
    ENCODE = "encode"
    OUTPUT = "output"
    UNKNOWN = "unknown"


class ErrorHandler:
    """Turn per-job exceptions into logged, failed conversion results.

    Every failure is isolated to the job that produced it: the handler logs
    one diagnostic line naming the file and the cause and returns a FAILED
    ConversionResult instead of raising.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize the error handler.

        Args:
            logger: Optional logger instance. If None, creates a default logger.
        """
        self.logger = logger or get_logger(__name__)

    def handle_error(self, error: Exception, context: dict[str, Any]) -> ConversionResult:
        """Log an error and build the failed result for its job.

        Args:
            error: The exception that occurred
            context: Context information (input_path, operation, processing_time, ...)

        Returns:
            ConversionResult with FAILED status and error message
        """
        category = self._classify_error(error)
        user_message = self._generate_user_message(error, category, context)
        self._log_error(error, category, user_message, context)

        input_path = context.get("input_path")
        if input_path is None:
            input_path = Path("unknown")
        elif not isinstance(input_path, Path):
            input_path = Path(str(input_path))

        return ConversionResult(
            input_path=input_path,
            output_path=None,
            status=ConversionStatus.FAILED,
            error_message=user_message,
            error_kind=type(error).__name__,
            width=context.get("width"),
            height=context.get("height"),
            processing_time=context.get("processing_time", 0.0),
        )

    def _classify_error(self, error: Exception) -> ErrorCategory:
        """Classify error into category for appropriate handling.

        Args:
            error: The exception to classify

        Returns:
            ErrorCategory indicating the type of error
        """
        if isinstance(error, (InputNotFoundError, TraversalError)):
            return ErrorCategory.INPUT
        elif isinstance(error, (ContextCreationError, DecodeError)):
            return ErrorCategory.DECODE
        elif isinstance(error, (UnsupportedFormatError, EncodeError)):
            return ErrorCategory.ENCODE
        elif isinstance(error, (WriteError, DeleteError)):
            return ErrorCategory.OUTPUT
        else:
            return ErrorCategory.UNKNOWN

    def _generate_user_message(
        self, error: Exception, category: ErrorCategory, context: dict[str, Any]
    ) -> str:
        """Generate a one-line message naming the file and the cause.

        Args:
            error: The exception that occurred
            category: The error category
            context: Context information

        Returns:
            User-friendly error message in English
        """
        input_path = context.get("input_path")
        filename = str(input_path) if input_path else "unknown file"
        base_message = str(error)

        if category == ErrorCategory.INPUT:
            return f"Input error for {filename}: {base_message}"
        elif category == ErrorCategory.DECODE:
            return f"Decode error for {filename}: {base_message}"
        elif category == ErrorCategory.ENCODE:
            return f"Encode error for {filename}: {base_message}"
        elif category == ErrorCategory.OUTPUT:
            return f"Output error for {filename}: {base_message}"
        else:  # UNKNOWN
            operation = context.get("operation", "conversion")
            return f"Unexpected error during {operation} of {filename}: {base_message}"

    def _log_error(
        self,
        error: Exception,
        category: ErrorCategory,
        user_message: str,
        context: dict[str, Any],
    ) -> None:
        """Log error with full context and stack trace.

        Args:
            error: The exception that occurred
            category: The error category
            user_message: The one-line diagnostic
            context: Context information
        """
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())

        self.logger.error(
            f"[{category.value}] {type(error).__name__}: {user_message}",
            extra={"context": context_str},
        )

        # Stack trace only at DEBUG level
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                f"Stack trace for error in {context.get('input_path', 'unknown')}:\n"
                f"{''.join(traceback.format_exception(type(error), error, error.__traceback__))}"
            )
