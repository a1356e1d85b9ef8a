"""HEIC Batch Converter.

Converts HEIC photos to JPEG or PNG, one file or a whole directory tree at a
time, with a bounded number of conversions running in parallel.
"""

__version__ = "0.1.0"

from heic_batch.codec import HeifCodec, HeifContext, HeifImageHandle
from heic_batch.config import create_config, detect_parallelism
from heic_batch.converter import ConversionWorker
from heic_batch.coordinator import BatchCoordinator, ConcurrencySlots, StartBarrier
from heic_batch.encoder import RasterEncoder
from heic_batch.errors import (
    ContextCreationError,
    ConversionError,
    DecodeError,
    DeleteError,
    EncodeError,
    ErrorHandler,
    InputNotFoundError,
    TraversalError,
    UnsupportedFormatError,
    WriteError,
)
from heic_batch.filesystem import FileSystemHandler
from heic_batch.logging_config import get_logger, setup_logging
from heic_batch.models import (
    BatchResults,
    Config,
    ConversionJob,
    ConversionResult,
    ConversionStatus,
    OutputFormat,
)
from heic_batch.orchestrator import ConversionOrchestrator

__all__ = [
    "BatchCoordinator",
    "BatchResults",
    "ConcurrencySlots",
    "Config",
    "ContextCreationError",
    "ConversionError",
    "ConversionJob",
    "ConversionOrchestrator",
    "ConversionResult",
    "ConversionStatus",
    "ConversionWorker",
    "DecodeError",
    "DeleteError",
    "EncodeError",
    "ErrorHandler",
    "FileSystemHandler",
    "HeifCodec",
    "HeifContext",
    "HeifImageHandle",
    "InputNotFoundError",
    "OutputFormat",
    "RasterEncoder",
    "StartBarrier",
    "TraversalError",
    "UnsupportedFormatError",
    "WriteError",
    "create_config",
    "detect_parallelism",
    "get_logger",
    "setup_logging",
]
