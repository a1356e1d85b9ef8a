"""HEIC decoding through pillow-heif (libheif)."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import pillow_heif

from heic_batch.errors import DecodeError

if TYPE_CHECKING:
    from PIL import Image


class HeifImageHandle:
    """The primary image of a HEIF container, not yet decoded."""

    def __init__(self, heif_image: pillow_heif.HeifImage):
        self._heif_image = heif_image

    @property
    def width(self) -> int:
        return int(self._heif_image.size[0])

    @property
    def height(self) -> int:
        return int(self._heif_image.size[1])

    def decode(self) -> Image.Image:
        """Decode the image into a Pillow image.

        libheif picks the colorspace and chroma; HDR images arrive as 8-bit.

        Raises:
            DecodeError: If libheif cannot decode the bitstream
        """
        try:
            return self._heif_image.to_pillow()
        except Exception as e:
            raise DecodeError(f"Could not decode image: {e}") from e


class HeifContext:
    """Decoding context for one HEIF container."""

    def __init__(self, convert_hdr_to_8bit: bool = True):
        self.convert_hdr_to_8bit = convert_hdr_to_8bit
        self._heif_file: pillow_heif.HeifFile | None = None

    def read_from_bytes(self, data: bytes) -> None:
        """Parse the container held in ``data``.

        Raises:
            DecodeError: If the bytes are not a readable HEIF container
        """
        try:
            self._heif_file = pillow_heif.open_heif(
                io.BytesIO(data), convert_hdr_to_8bit=self.convert_hdr_to_8bit
            )
        except Exception as e:
            raise DecodeError(f"Could not read HEIF container: {e}") from e

    def primary_image_handle(self) -> HeifImageHandle:
        """Return the container's primary image.

        Raises:
            DecodeError: If nothing was read or there is no primary image
        """
        if self._heif_file is None:
            raise DecodeError("Could not get primary image: no container has been read")
        try:
            primary = self._heif_file[self._heif_file.primary_index]
        except Exception as e:
            raise DecodeError(f"Could not get primary image: {e}") from e
        return HeifImageHandle(primary)


class HeifCodec:
    """Factory for decoding contexts."""

    def __init__(self, convert_hdr_to_8bit: bool = True):
        self.convert_hdr_to_8bit = convert_hdr_to_8bit

    def open_context(self) -> HeifContext:
        return HeifContext(convert_hdr_to_8bit=self.convert_hdr_to_8bit)
