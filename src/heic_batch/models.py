"""Core data models for the HEIC batch converter."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class OutputFormat(Enum):
    """Raster formats a HEIC image can be converted to."""

    JPEG = "jpeg"
    PNG = "png"

    @property
    def suffix(self) -> str:
        """File suffix written for this format."""
        return ".jpg" if self is OutputFormat.JPEG else ".png"

    @property
    def accepted_suffixes(self) -> frozenset[str]:
        """Suffixes recognised as naming an output file of this format."""
        if self is OutputFormat.JPEG:
            return frozenset({".jpg", ".jpeg"})
        return frozenset({".png"})

    @classmethod
    def parse(cls, value: str) -> "OutputFormat":
        """Resolve a user supplied format name.

        Args:
            value: Format name, case-insensitive (``jpeg``, ``jpg`` or ``png``)

        Returns:
            Matching OutputFormat

        Raises:
            UnsupportedFormatError: If the name is not a supported format
        """
        from heic_batch.errors import UnsupportedFormatError

        normalized = value.strip().lower()
        if normalized == "jpg":
            normalized = "jpeg"
        for member in cls:
            if member.value == normalized:
                return member
        raise UnsupportedFormatError(f"Unsupported format: {value}")


class ConversionStatus(Enum):
    """Status of a conversion operation."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class Config:
    """Configuration for a conversion run.

    Attributes:
        output_format: Requested output format name (resolved per job)
        quality: JPEG quality level (1-100, default 80)
        output_path: Output directory, or output file in single-file mode
        delete_original: Remove the source file after a successful conversion
        verbose: Enable verbose logging
        parallel_workers: Number of concurrent workers (None = auto-detect)
    """

    output_format: str = "jpeg"
    quality: int = 80
    output_path: Path | None = None
    delete_original: bool = False
    verbose: bool = False
    parallel_workers: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not 1 <= self.quality <= 100:
            raise ValueError(f"Quality must be between 1 and 100, got {self.quality}")
        if self.parallel_workers is not None and self.parallel_workers < 1:
            raise ValueError(f"parallel_workers must be at least 1, got {self.parallel_workers}")


@dataclass(frozen=True)
class ConversionJob:
    """A single unit of conversion work.

    Attributes:
        source: Path to the HEIC source file
        output_path: Output directory (or file when output_is_file is set)
        output_format: Requested format name, resolved when the job runs
        quality: JPEG quality (1-100), ignored for PNG
        delete_original: Remove the source after a successful conversion
        output_is_file: Treat output_path as the exact output file
    """

    source: Path
    output_path: Path | None = None
    output_format: str = "jpeg"
    quality: int = 80
    delete_original: bool = False
    output_is_file: bool = False


@dataclass
class ConversionResult:
    """Result of a single conversion job.

    Attributes:
        input_path: Path to the source file
        output_path: Path to the written file (None if the job failed)
        status: Conversion status
        error_message: Error message if the job failed
        error_kind: Name of the error type that failed the job
        deleted: Whether the source file was removed
        delete_error: Error message if removing the source failed
        width: Width of the decoded image, if it got that far
        height: Height of the decoded image, if it got that far
        processing_time: Time taken to process in seconds
    """

    input_path: Path
    output_path: Path | None
    status: ConversionStatus
    error_message: str | None = None
    error_kind: str | None = None
    deleted: bool = False
    delete_error: str | None = None
    width: int | None = None
    height: int | None = None
    processing_time: float = 0.0


@dataclass
class BatchResults:
    """Results of a conversion run.

    Attributes:
        results: List of individual conversion results
        total_files: Total number of jobs run
        successful: Number of successful conversions
        failed: Number of failed conversions
        deleted: Number of source files removed
        total_time: Total time taken in seconds
    """

    results: list[ConversionResult] = field(default_factory=list)
    total_files: int = 0
    successful: int = 0
    failed: int = 0
    deleted: int = 0
    total_time: float = 0.0

    def success_rate(self) -> float:
        """Calculate success rate as percentage.

        Returns:
            Success rate as a percentage (0.0 to 100.0)
        """
        if self.total_files == 0:
            return 0.0
        return (self.successful / self.total_files) * 100.0

    @classmethod
    def from_results(cls, results: list[ConversionResult], total_time: float) -> "BatchResults":
        """Aggregate individual results into batch totals."""
        return cls(
            results=results,
            total_files=len(results),
            successful=sum(1 for r in results if r.status == ConversionStatus.SUCCESS),
            failed=sum(1 for r in results if r.status == ConversionStatus.FAILED),
            deleted=sum(1 for r in results if r.deleted),
            total_time=total_time,
        )
