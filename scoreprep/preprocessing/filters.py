"""Per-pixel filters: grayscale, median denoise, contrast and sharpening."""

import cv2
import numpy as np

from scoreprep.config import (
    DEFAULT_BRIGHTNESS,
    DEFAULT_CONTRAST,
    SHARPEN_BRIGHTNESS,
    SHARPEN_CONTRAST,
)
from scoreprep.errors import DimensionError
from scoreprep.models import PixelBuffer, buffer_shape


def to_grayscale(image: PixelBuffer) -> PixelBuffer:
    """
    Reduce a BGR/BGRA image to a single luma channel.

    Uses OpenCV's BT.601 weights (0.299 R + 0.587 G + 0.114 B, rounded).
    Single-channel input is returned unchanged.
    """
    if image.ndim == 2:
        return image
    channels = image.shape[2]
    if channels == 1:
        return np.ascontiguousarray(image[:, :, 0])
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def median_filter(gray: PixelBuffer) -> PixelBuffer:
    """
    3x3 median filter for salt-and-pepper noise.

    Interior pixels get the median of their 3x3 neighbourhood. The outermost
    1-pixel ring is copied unchanged from the input (no reflection at edges),
    so border noise survives this stage.
    """
    if gray.ndim != 2:
        raise DimensionError("median_filter expects a single-channel image")

    h, w = gray.shape
    if h < 3 or w < 3:
        return gray.copy()

    # medianBlur replicates borders; only its interior result is kept
    result = cv2.medianBlur(gray, 3)
    result[0, :] = gray[0, :]
    result[-1, :] = gray[-1, :]
    result[:, 0] = gray[:, 0]
    result[:, -1] = gray[:, -1]
    return result


def enhance_contrast(
    image: PixelBuffer,
    contrast: float = DEFAULT_CONTRAST,
    brightness: float = DEFAULT_BRIGHTNESS,
) -> PixelBuffer:
    """
    Linear contrast/brightness: clamp(v * contrast + brightness, 0, 255).

    Applied identically to every colour channel; a BGRA alpha channel is
    left untouched.
    """
    _, _, channels = buffer_shape(image)
    scaled = np.rint(image.astype(np.float32) * contrast + brightness)
    result = np.clip(scaled, 0, 255).astype(np.uint8)
    if channels == 4:
        result[:, :, 3] = image[:, :, 3]
    return result


def sharpen(image: PixelBuffer) -> PixelBuffer:
    """Sharpen via a stronger linear boost (x1.5, -40) instead of a convolution."""
    return enhance_contrast(image, SHARPEN_CONTRAST, SHARPEN_BRIGHTNESS)


def unsharp_mask(image: PixelBuffer, sigma: float = 1.0, amount: float = 1.0) -> PixelBuffer:
    """Gaussian unsharp mask: image + amount * (image - blur(image))."""
    blurred = cv2.GaussianBlur(image, (0, 0), sigma)
    result = cv2.addWeighted(image, 1.0 + amount, blurred, -amount, 0)
    if image.ndim == 3 and image.shape[2] == 4:
        result[:, :, 3] = image[:, :, 3]
    return result
