"""Decode/encode boundary between raw image bytes and pixel buffers."""

import logging
from io import BytesIO

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from scoreprep.errors import DecodeError, EncodeError
from scoreprep.models import EXIF_ORIENTATION_TAG, Orientation, PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_PNG_COMPRESSION = 3


def decode_image(raw: bytes) -> PixelBuffer:
    """
    Decode JPEG/PNG bytes into a BGR buffer.

    EXIF orientation is ignored here; the geometry stage applies it.

    Raises:
        DecodeError: If the bytes are empty or not a decodable image.
    """
    if not raw:
        raise DecodeError("Empty image data")

    image = cv2.imdecode(
        np.frombuffer(raw, np.uint8),
        cv2.IMREAD_COLOR | cv2.IMREAD_IGNORE_ORIENTATION,
    )
    if image is None:
        raise DecodeError(f"Cannot decode image ({len(raw)} bytes)")
    return image


def read_orientation(raw: bytes) -> Orientation:
    """Read the EXIF orientation tag, NORMAL when absent or unreadable."""
    try:
        with Image.open(BytesIO(raw)) as img:
            value = img.getexif().get(EXIF_ORIENTATION_TAG)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.debug("No readable EXIF orientation: %s", e)
        return Orientation.NORMAL
    return Orientation.from_exif(value)


def encode_png(image: PixelBuffer, compression: int = DEFAULT_PNG_COMPRESSION) -> bytes:
    """
    Encode a buffer as lossless PNG.

    The compression level (0-9) trades size for speed and never alters pixels.

    Raises:
        EncodeError: If OpenCV cannot encode the buffer.
    """
    try:
        ok, encoded = cv2.imencode(
            ".png", image, [cv2.IMWRITE_PNG_COMPRESSION, compression]
        )
    except cv2.error as e:
        raise EncodeError(f"PNG encoding failed: {e}") from e
    if not ok:
        raise EncodeError("PNG encoding failed")
    return encoded.tobytes()


def decode_png(data: bytes) -> PixelBuffer:
    """Decode PNG bytes keeping the stored channel layout."""
    if not data:
        raise DecodeError("Empty PNG data")
    image = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise DecodeError("Cannot decode PNG data")
    return image
