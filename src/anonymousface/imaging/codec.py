"""Decode input images and encode anonymized output."""

from dataclasses import dataclass
from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from anonymousface.errors import DecodeError

INPUT_FORMATS = ("JPEG", "PNG", "GIF", "WEBP", "BMP")
OUTPUT_EXTENSION = ".png"
OUTPUT_CONTENT_TYPE = "image/png"


@dataclass(frozen=True)
class PixelImage:
    """A decoded RGBA raster."""

    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def grayscale(self) -> np.ndarray:
        """Single-channel ITU-R 601-2 luma view, shape (height, width)."""
        return np.asarray(self.image.convert("L"), dtype=np.uint8)


def decode_image(data: bytes) -> PixelImage:
    """Decode JPEG/PNG/GIF/WEBP/BMP bytes into an RGBA PixelImage.

    Raises:
        DecodeError: The bytes are empty, corrupt or in an unsupported format.
    """
    if not data:
        raise DecodeError("empty image")
    try:
        with Image.open(BytesIO(data), formats=INPUT_FORMATS) as img:
            img.load()
            rgba = img.convert("RGBA")
    except UnidentifiedImageError as exc:
        raise DecodeError(f"unsupported or unrecognized image format: {exc}") from exc
    except (OSError, SyntaxError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"corrupt image: {exc}") from exc
    return PixelImage(rgba)


def encode_png(image: PixelImage) -> bytes:
    """Encode losslessly as PNG.

    No text chunks or timestamps are written, so identical pixels always give
    identical bytes.
    """
    buf = BytesIO()
    image.image.save(buf, format="PNG", optimize=False)
    return buf.getvalue()
