"""Conversion orchestrator for the HEIC batch converter.

Turns a Config into conversion jobs and runs them:
- single-file mode validates one input and may name the output file
- directory mode discovers every HEIC file under a tree
- output paths are planned up front so batch outputs never collide
"""

from __future__ import annotations

from hashlib import blake2s
from typing import TYPE_CHECKING

from heic_batch.config import detect_parallelism
from heic_batch.converter import ConversionWorker
from heic_batch.coordinator import BatchCoordinator
from heic_batch.errors import ErrorHandler, TraversalError, UnsupportedFormatError
from heic_batch.filesystem import FileSystemHandler
from heic_batch.logging_config import get_logger, log_operation_error
from heic_batch.models import BatchResults, Config, ConversionJob, OutputFormat

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from pathlib import Path


class ConversionOrchestrator:
    """Entry point for single-file and directory conversions."""

    def __init__(
        self,
        config: Config,
        logger: logging.Logger | None = None,
        progress_callback: Callable[[int, int, str], None] | None = None,
        worker: ConversionWorker | None = None,
    ):
        """Initialize orchestrator with configuration.

        Args:
            config: Configuration for conversions
            logger: Optional logger instance
            progress_callback: Optional callback for progress updates (current, total, filename)
            worker: Optional converter, built from defaults when omitted
        """
        self.config = config
        self.logger = logger or get_logger(__name__)
        self.progress_callback = progress_callback

        self.filesystem = FileSystemHandler()
        self.error_handler = ErrorHandler(self.logger)
        self.worker = worker or ConversionWorker(
            filesystem=self.filesystem, error_handler=self.error_handler, logger=self.logger
        )
        self.worker_count = config.parallel_workers or detect_parallelism()

        self.logger.debug(f"ConversionOrchestrator initialized with {self.worker_count} workers")

    def convert_file(self, input_path: Path) -> BatchResults:
        """Convert a single HEIC file.

        Args:
            input_path: Path to the source file

        Returns:
            BatchResults holding the one job's result

        Raises:
            InputNotFoundError: If the file does not exist
        """
        self.filesystem.require_file(input_path)

        output_is_file = False
        if self.config.output_path is not None:
            output_is_file = self._names_output_file(self.config.output_path)

        job = self._make_job(input_path, self.config.output_path, output_is_file)
        return self._run([job])

    def convert_directory(self, input_dir: Path) -> BatchResults:
        """Convert every HEIC file under a directory.

        An empty directory is not an error: the run completes with no jobs.

        Args:
            input_dir: Directory to scan recursively

        Returns:
            BatchResults with one result per discovered file

        Raises:
            InputNotFoundError: If the directory does not exist
            TraversalError: If the directory walk fails; no job is started
        """
        try:
            files = self.filesystem.find_source_files(input_dir)
        except TraversalError as e:
            log_operation_error(self.logger, "file discovery", e, input_dir=input_dir)
            raise
        self.logger.info(f"Found {len(files)} HEIC files in {input_dir}")

        jobs = [
            self._make_job(source, output_path, output_is_file)
            for source, output_path, output_is_file in self._plan_outputs(files)
        ]
        return self._run(jobs)

    def _run(self, jobs: list[ConversionJob]) -> BatchResults:
        coordinator = BatchCoordinator(
            self.worker, self.worker_count, self.logger, self.progress_callback
        )
        return coordinator.run(jobs)

    def _make_job(
        self, source: Path, output_path: Path | None, output_is_file: bool = False
    ) -> ConversionJob:
        return ConversionJob(
            source=source,
            output_path=output_path,
            output_format=self.config.output_format,
            quality=self.config.quality,
            delete_original=self.config.delete_original,
            output_is_file=output_is_file,
        )

    def _names_output_file(self, output_path: Path) -> bool:
        try:
            output_format = OutputFormat.parse(self.config.output_format)
        except UnsupportedFormatError:
            # Reported by the job itself
            return False
        if self.filesystem.names_output_file(output_path, output_format):
            return True

        for other_format in OutputFormat:
            if other_format is not output_format and self.filesystem.names_output_file(
                output_path, other_format
            ):
                self.logger.warning(
                    f"Output path {output_path} has a {other_format.value} suffix but the "
                    f"format is {output_format.value}; treating it as a directory"
                )
                break
        return False

    def _plan_outputs(self, files: list[Path]) -> list[tuple[Path, Path | None, bool]]:
        """Pair each source with an output location no other source uses.

        Two sources can map to one output: sources in different directories
        that share a name and a common output directory, or names in the same
        directory that differ only in where their dots sit (``a.b_c.heic``
        and ``a_b.c.heic`` both become ``a_b_c.heic``). Every source after
        the first gets an exact output file whose name carries a short hash
        of its source path.

        Returns:
            (source, output_path, output_is_file) per file
        """
        output_dir = self.config.output_path
        try:
            output_format = OutputFormat.parse(self.config.output_format)
        except UnsupportedFormatError:
            # Every job fails on the format anyway, nothing gets written
            return [(source, output_dir, False) for source in files]

        used_outputs: set[str] = set()
        planned: list[tuple[Path, Path | None, bool]] = []

        for source in files:
            target_dir = output_dir if output_dir is not None else source.parent
            base_name = self.filesystem.output_name(source)
            name = base_name
            duplicate_index = 0
            while self._output_key(target_dir, name) in used_outputs:
                name = self._with_collision_suffix(base_name, source, duplicate_index)
                duplicate_index += 1
            used_outputs.add(self._output_key(target_dir, name))

            if name == base_name:
                planned.append((source, output_dir, False))
                continue

            self.logger.warning(
                f"Output path collision detected for {source}; "
                f"using {name}{output_format.suffix} instead of {base_name}{output_format.suffix}"
            )
            planned.append((source, target_dir / f"{name}{output_format.suffix}", True))

        return planned

    @staticmethod
    def _output_key(target_dir: Path, name: str) -> str:
        # Case-insensitive so outputs stay distinct on case-folding file systems
        return str(target_dir / name).lower()

    @staticmethod
    def _with_collision_suffix(base_name: str, source: Path, index: int) -> str:
        """Build a collision-safe output name using a deterministic source hash."""
        try:
            source_key = str(source.resolve(strict=False))
        except (OSError, RuntimeError):
            source_key = str(source)
        source_hash = blake2s(source_key.encode("utf-8"), digest_size=4).hexdigest()
        ordinal_suffix = "" if index == 0 else f"_{index}"
        return f"{base_name}_{source_hash}{ordinal_suffix}"
