"""Configuration handling for the HEIC batch converter."""

import os
from pathlib import Path

from .models import Config

DEFAULT_QUALITY = 80
DEFAULT_FORMAT = "jpeg"
FALLBACK_WORKERS = 4


def detect_parallelism() -> int:
    """Number of conversions allowed to run at once on this host.

    Returns:
        Logical CPU count, or a fallback of 4 when it cannot be determined
    """
    cpu_count = os.cpu_count()
    if cpu_count is None:
        return FALLBACK_WORKERS
    return cpu_count


def _optional_path(value: str | Path | None) -> Path | None:
    """Treat empty CLI strings as "not given"."""
    if value is None:
        return None
    if isinstance(value, Path):
        return value
    value = value.strip()
    return Path(value) if value else None


def create_config(
    output_format: str | None = None,
    quality: int | None = None,
    output_path: str | Path | None = None,
    delete_original: bool = False,
    verbose: bool = False,
    parallel_workers: int | None = None,
) -> Config:
    """Create a validated Config from command-line values.

    The format name is only normalized here, not resolved: an unsupported
    format is reported by each job, so a typo does not abort the run.

    Args:
        output_format: Output format name (default "jpeg")
        quality: JPEG quality (1-100); out-of-range values fall back to 80
        output_path: Output directory or file; empty string means "next to source"
        delete_original: Remove sources after successful conversion
        verbose: Enable verbose logging
        parallel_workers: Concurrent workers (None = CPU count)

    Returns:
        Config object

    Raises:
        ValueError: If parallel_workers is less than 1
    """
    final_quality = DEFAULT_QUALITY
    if quality is not None and 1 <= quality <= 100:
        final_quality = quality

    final_format = (output_format or DEFAULT_FORMAT).strip().lower() or DEFAULT_FORMAT

    return Config(
        output_format=final_format,
        quality=final_quality,
        output_path=_optional_path(output_path),
        delete_original=delete_original,
        verbose=verbose,
        parallel_workers=parallel_workers,
    )
