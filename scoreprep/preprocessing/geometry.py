"""Orientation correction and resize-to-bound."""

import logging

import cv2

from scoreprep.models import Orientation, PixelBuffer, buffer_shape

logger = logging.getLogger(__name__)

_ROTATIONS = {
    Orientation.ROTATE_90: cv2.ROTATE_90_CLOCKWISE,
    Orientation.ROTATE_180: cv2.ROTATE_180,
    Orientation.ROTATE_270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}

_FLIPS = {
    Orientation.FLIP_HORIZONTAL: 1,  # mirror around the vertical axis
    Orientation.FLIP_VERTICAL: 0,
}


def apply_orientation(image: PixelBuffer, orientation: Orientation) -> PixelBuffer:
    """Rotate or mirror the image so it displays upright.

    90/270 degree rotations swap width and height. NORMAL returns the input.
    """
    if orientation in _ROTATIONS:
        return cv2.rotate(image, _ROTATIONS[orientation])
    if orientation in _FLIPS:
        return cv2.flip(image, _FLIPS[orientation])
    return image


def scaled_size(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Dimensions after a uniform scale that fits the long edge in max_dimension."""
    longest = max(width, height)
    if longest <= max_dimension:
        return width, height
    scale = max_dimension / longest
    return max(1, int(width * scale + 0.5)), max(1, int(height * scale + 0.5))


def resize_to_max_dimension(image: PixelBuffer, max_dimension: int) -> PixelBuffer:
    """
    Scale the image down so max(width, height) <= max_dimension.

    Aspect ratio is preserved. Images already within the bound are returned
    as-is. Downscaling uses area averaging (INTER_AREA).
    """
    width, height, _ = buffer_shape(image)
    new_w, new_h = scaled_size(width, height, max_dimension)
    if (new_w, new_h) == (width, height):
        return image

    logger.debug("Resizing %dx%d -> %dx%d", width, height, new_w, new_h)
    return cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)


def normalize(
    image: PixelBuffer, orientation: Orientation, max_dimension: int
) -> PixelBuffer:
    """Geometry stage: orientation correction followed by resize-to-bound."""
    if orientation is not Orientation.NORMAL:
        logger.debug("Applying orientation %s", orientation.name)
    image = apply_orientation(image, orientation)
    return resize_to_max_dimension(image, max_dimension)
