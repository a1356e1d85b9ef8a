"""File system operations for the HEIC batch converter."""

from __future__ import annotations

import contextlib
import os
import threading
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from .errors import DecodeError, DeleteError, InputNotFoundError, TraversalError, WriteError

if TYPE_CHECKING:
    from .models import OutputFormat


def _raise_walk_error(error: OSError) -> NoReturn:
    raise error


class FileSystemHandler:
    """Handle the converter's file system operations.

    This class covers:
    - Input validation (file and directory mode)
    - Recursive discovery of source files
    - Output path derivation
    - Atomic output writes
    - Source removal
    """

    SOURCE_EXTENSION = ".heic"

    def require_file(self, path: Path) -> None:
        """Check that a single input file exists and is a regular file.

        Raises:
            InputNotFoundError: If the path is missing or not a file
        """
        if not path.exists():
            raise InputNotFoundError(f"Input file '{path}' does not exist.")
        if not path.is_file():
            raise InputNotFoundError(f"Input path '{path}' is not a file.")

    def require_directory(self, path: Path) -> None:
        """Check that an input directory exists.

        Raises:
            InputNotFoundError: If the path is missing or not a directory
        """
        if not path.exists():
            raise InputNotFoundError(f"Input directory '{path}' does not exist.")
        if not path.is_dir():
            raise InputNotFoundError(f"Input path '{path}' is not a directory.")

    def is_source_file(self, path: Path) -> bool:
        """Whether a path names a source file by extension (case-insensitive)."""
        return path.suffix.lower() == self.SOURCE_EXTENSION

    def find_source_files(self, root: Path) -> list[Path]:
        """Recursively find every HEIC file under a directory.

        Directories and files are visited in lexical order, so the result is
        deterministic. Any error while walking aborts the discovery.

        Args:
            root: Directory to scan

        Returns:
            Paths of all regular files with a .heic extension (any case)

        Raises:
            InputNotFoundError: If root is not an existing directory
            TraversalError: If an entry cannot be read during the walk
        """
        self.require_directory(root)

        found: list[Path] = []
        try:
            for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
                dirnames.sort()
                for filename in sorted(filenames):
                    candidate = Path(dirpath) / filename
                    if self.is_source_file(candidate) and candidate.is_file():
                        found.append(candidate)
        except OSError as e:
            raise TraversalError(f"Error finding HEIC files in {root}: {e}") from e

        return found

    def read_file(self, path: Path) -> bytes:
        """Read a source file.

        Raises:
            DecodeError: If the file cannot be read
        """
        try:
            return path.read_bytes()
        except OSError as e:
            raise DecodeError(f"Could not read file {path}: {e}") from e

    @staticmethod
    def output_name(source: Path) -> str:
        """Output base name: the source name with its first '.' replaced by '_'.

        ``IMG_0001.HEIC`` becomes ``IMG_0001_HEIC``; the format suffix is
        appended by the caller.
        """
        return source.name.replace(".", "_", 1)

    def get_output_path(
        self,
        source: Path,
        output_format: OutputFormat,
        output_path: Path | None = None,
        output_is_file: bool = False,
    ) -> Path:
        """Derive where a converted image is written.

        Args:
            source: Path to the source file
            output_format: Resolved output format
            output_path: Output directory, or exact output file
            output_is_file: Use output_path as the output file itself

        Returns:
            Path of the output file
        """
        if output_path is not None and output_is_file:
            return output_path

        filename = self.output_name(source) + output_format.suffix
        if output_path is not None:
            return output_path / filename
        return source.parent / filename

    def names_output_file(self, output_path: Path, output_format: OutputFormat) -> bool:
        """Whether an output path names a file of the given format, not a directory."""
        if output_path.is_dir():
            return False
        return output_path.suffix.lower() in output_format.accepted_suffixes

    def write_file(self, path: Path, data: bytes) -> None:
        """Write output bytes, replacing any existing file.

        The bytes go to a uniquely named temporary sibling first and are
        renamed into place, so a failed write never leaves a truncated output
        and concurrent writers never share a temporary file.

        Raises:
            WriteError: If the directory cannot be created or the write fails
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(f"Could not create output directory {path.parent}: {e}") from e

        temp_path = self._temp_path(path)
        try:
            temp_path.write_bytes(data)
            temp_path.replace(path)
        except OSError as e:
            if temp_path.exists():
                with contextlib.suppress(OSError):
                    temp_path.unlink()
            raise WriteError(f"Could not save image as {path}: {e}") from e

    @staticmethod
    def _temp_path(path: Path) -> Path:
        # Unique per process and thread, so parallel writers never share one
        return path.with_name(f".{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")

    def delete_file(self, path: Path) -> None:
        """Remove a source file.

        Raises:
            DeleteError: If the file cannot be removed
        """
        try:
            path.unlink()
        except OSError as e:
            raise DeleteError(f"Failed to delete original file {path}: {e}") from e
