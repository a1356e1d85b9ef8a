"""JPEG and PNG encoding with Pillow."""

from __future__ import annotations

import io

from PIL import Image

from heic_batch.errors import EncodeError
from heic_batch.models import OutputFormat

# Pillow's JPEG encoder accepts these modes as-is
JPEG_MODES = frozenset({"RGB", "L", "CMYK"})


class RasterEncoder:
    """Serialize decoded images into output file bytes.

    EXIF and ICC profile data carried by the decoded image are written into
    the output so camera metadata and color management survive conversion.
    """

    def encode(self, image: Image.Image, output_format: OutputFormat, quality: int) -> bytes:
        """Encode an image in the requested format.

        Args:
            image: Decoded image
            output_format: Target format
            quality: JPEG quality (1-100), ignored for PNG

        Returns:
            Encoded file contents

        Raises:
            EncodeError: If the encoder fails
        """
        if output_format is OutputFormat.JPEG:
            return self.encode_jpeg(image, quality)
        return self.encode_png(image)

    def encode_jpeg(self, image: Image.Image, quality: int) -> bytes:
        try:
            rgb_image = image if image.mode in JPEG_MODES else image.convert("RGB")
            return self._save(rgb_image, "JPEG", quality=quality, **self._metadata(image))
        except Exception as e:
            raise EncodeError(f"Could not encode image as JPEG: {e}") from e

    def encode_png(self, image: Image.Image) -> bytes:
        try:
            return self._save(image, "PNG", **self._metadata(image))
        except Exception as e:
            raise EncodeError(f"Could not encode image as PNG: {e}") from e

    @staticmethod
    def _metadata(image: Image.Image) -> dict[str, bytes]:
        metadata: dict[str, bytes] = {}
        exif = image.info.get("exif")
        if isinstance(exif, bytes) and exif:
            metadata["exif"] = exif
        icc_profile = image.info.get("icc_profile")
        if isinstance(icc_profile, bytes) and icc_profile:
            metadata["icc_profile"] = icc_profile
        return metadata

    @staticmethod
    def _save(image: Image.Image, format_name: str, **params: object) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format=format_name, **params)
        return buffer.getvalue()
