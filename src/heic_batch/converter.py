"""Per-file conversion: decode, encode, write and optionally delete."""

from __future__ import annotations

import logging
from time import perf_counter
from typing import TYPE_CHECKING, Any

from heic_batch.codec import HeifCodec
from heic_batch.encoder import RasterEncoder
from heic_batch.errors import ContextCreationError, DeleteError, ErrorHandler
from heic_batch.filesystem import FileSystemHandler
from heic_batch.logging_config import get_logger
from heic_batch.models import ConversionJob, ConversionResult, ConversionStatus, OutputFormat

if TYPE_CHECKING:
    from heic_batch.codec import HeifContext, HeifImageHandle


class ConversionWorker:
    """Convert one HEIC file per call.

    Steps run in this order:
    1. Create a decoding context and read the source into it
    2. Locate the primary image
    3. Decode it
    4. Derive the output path
    5. Encode (JPEG with quality, or PNG)
    6. Write the output, replacing any existing file
    7. Remove the source if requested

    A failure in steps 1-6 ends the job with a FAILED result and nothing
    written. A failure in step 7 is reported but the job stays SUCCESS.
    The worker holds no state between calls and is safe to share between
    threads.
    """

    def __init__(
        self,
        codec: HeifCodec | None = None,
        encoder: RasterEncoder | None = None,
        filesystem: FileSystemHandler | None = None,
        error_handler: ErrorHandler | None = None,
        logger: logging.Logger | None = None,
    ):
        self.logger = logger or get_logger(__name__)
        self.codec = codec or HeifCodec()
        self.encoder = encoder or RasterEncoder()
        self.filesystem = filesystem or FileSystemHandler()
        self.error_handler = error_handler or ErrorHandler(self.logger)

    def convert(self, job: ConversionJob) -> ConversionResult:
        """Run a conversion job to completion.

        Never raises: every error becomes a FAILED result.

        Args:
            job: The job to run

        Returns:
            ConversionResult describing the outcome
        """
        start_time = perf_counter()
        context: dict[str, Any] = {"input_path": job.source, "operation": "conversion"}

        try:
            heif_context = self._open_context()
            heif_context.read_from_bytes(self.filesystem.read_file(job.source))
            handle: HeifImageHandle = heif_context.primary_image_handle()
            context["width"], context["height"] = handle.width, handle.height

            self.logger.info(
                f"Converting file: {job.source} image size: {handle.width} x {handle.height}"
            )
            image = handle.decode()

            output_format = OutputFormat.parse(job.output_format)
            output_path = self.filesystem.get_output_path(
                job.source, output_format, job.output_path, job.output_is_file
            )

            data = self.encoder.encode(image, output_format, job.quality)
            self.filesystem.write_file(output_path, data)
            self.logger.info(f"Image saved as {output_path}")

        except Exception as e:
            context["processing_time"] = perf_counter() - start_time
            return self.error_handler.handle_error(e, context)

        result = ConversionResult(
            input_path=job.source,
            output_path=output_path,
            status=ConversionStatus.SUCCESS,
            width=handle.width,
            height=handle.height,
        )

        if job.delete_original:
            self._delete_source(job, result)

        result.processing_time = perf_counter() - start_time
        return result

    def _open_context(self) -> HeifContext:
        try:
            return self.codec.open_context()
        except Exception as e:
            raise ContextCreationError(f"Could not create context: {e}") from e

    def _delete_source(self, job: ConversionJob, result: ConversionResult) -> None:
        try:
            self.filesystem.delete_file(job.source)
        except DeleteError as e:
            # The output is already on disk; keep the job successful
            result.delete_error = str(e)
            self.logger.error(str(e))
            return

        result.deleted = True
        self.logger.info(f"Deleted original file: {job.source}")
