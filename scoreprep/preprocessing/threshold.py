"""
Binarization: Otsu global threshold and integral-image adaptive threshold.

Both binarizers take a single-channel uint8 image and return a single-channel
image containing only 0 (ink) and 255 (background).
"""

import logging

import numpy as np

from scoreprep.config import DEFAULT_BLOCK_SIZE, DEFAULT_OFFSET
from scoreprep.errors import DimensionError
from scoreprep.models import BinarizationMethod, IntegralTable, PixelBuffer

logger = logging.getLogger(__name__)

INK = 0
BACKGROUND = 255


def _require_gray(gray: PixelBuffer) -> None:
    if gray.ndim != 2:
        raise DimensionError("Binarization expects a single-channel image")


def otsu_threshold(gray: PixelBuffer) -> int:
    """
    Pick the global threshold maximizing between-class variance.

    Candidates are scanned from 0 to 255. A candidate with an empty background
    class is skipped and the scan stops once the foreground class is empty.
    Only a strictly greater variance replaces the current best, so ties keep
    the lowest threshold. A uniform image yields 0.
    """
    _require_gray(gray)
    hist = np.bincount(gray.ravel(), minlength=256).astype(np.int64)
    total = int(hist.sum())

    levels = np.arange(256, dtype=np.int64)
    weight_bg = np.cumsum(hist)
    weight_fg = total - weight_bg
    sum_bg = np.cumsum(levels * hist)
    sum_all = sum_bg[-1]

    # Candidates before the first populated bin are skipped, the scan ends at
    # the first t where the foreground empties.
    valid = (weight_bg > 0) & (weight_fg > 0)
    if not valid.any():
        return 0

    w_bg = weight_bg[valid].astype(np.float64)
    w_fg = weight_fg[valid].astype(np.float64)
    mean_bg = sum_bg[valid] / w_bg
    mean_fg = (sum_all - sum_bg[valid]) / w_fg
    diff = mean_bg - mean_fg
    variance = w_bg * w_fg * diff * diff

    best = int(np.argmax(variance))  # first maximum
    if variance[best] <= 0.0:
        return 0
    return int(levels[valid][best])


def otsu_binarize(gray: PixelBuffer) -> PixelBuffer:
    """Binarize with Otsu's threshold: 255 where v > t, else 0."""
    threshold = otsu_threshold(gray)
    logger.debug("Otsu threshold: %d", threshold)
    return apply_threshold(gray, threshold)


def apply_threshold(gray: PixelBuffer, threshold: int) -> PixelBuffer:
    """Fixed global threshold: 255 where v > threshold, else 0."""
    return np.where(gray > threshold, BACKGROUND, INK).astype(np.uint8)


def integral_table(gray: PixelBuffer) -> IntegralTable:
    """
    Summed-area table with a zero first row and column.

    table[y, x] is the sum of all intensities in rows < y and columns < x.
    64-bit accumulators keep large images from overflowing.
    """
    _require_gray(gray)
    h, w = gray.shape
    table = np.zeros((h + 1, w + 1), dtype=np.int64)
    np.cumsum(np.cumsum(gray, axis=0, dtype=np.int64), axis=1, out=table[1:, 1:])
    return table


def window_sums(table: IntegralTable, block_size: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Per-pixel sums and pixel counts over a block_size window clipped to bounds.

    Each window is [x - half, x + half] x [y - half, y + half] with
    half = block_size // 2, evaluated with four table lookups.
    """
    if block_size < 1:
        raise ValueError(f"block_size must be >= 1, got {block_size}")

    h, w = table.shape[0] - 1, table.shape[1] - 1
    half = block_size // 2

    ys = np.arange(h)
    xs = np.arange(w)
    y1 = np.maximum(0, ys - half)
    y2 = np.minimum(h - 1, ys + half)
    x1 = np.maximum(0, xs - half)
    x2 = np.minimum(w - 1, xs + half)

    sums = (
        table[np.ix_(y2 + 1, x2 + 1)]
        - table[np.ix_(y1, x2 + 1)]
        - table[np.ix_(y2 + 1, x1)]
        + table[np.ix_(y1, x1)]
    )
    counts = np.outer(y2 - y1 + 1, x2 - x1 + 1).astype(np.int64)
    return sums, counts


def local_means(gray: PixelBuffer, block_size: int = DEFAULT_BLOCK_SIZE) -> np.ndarray:
    """Integer local mean (sum // count) of each pixel's window."""
    sums, counts = window_sums(integral_table(gray), block_size)
    return sums // counts


def adaptive_threshold(
    gray: PixelBuffer,
    block_size: int = DEFAULT_BLOCK_SIZE,
    offset: int = DEFAULT_OFFSET,
) -> PixelBuffer:
    """
    Adaptive local threshold, robust to uneven lighting and shadows.

    A pixel is ink (0) when it is darker than its local window mean minus
    offset, otherwise background (255). Window means come from an integral
    image, so the cost per pixel does not depend on block_size.
    """
    means = local_means(gray, block_size)
    ink = gray.astype(np.int64) < means - offset
    return np.where(ink, INK, BACKGROUND).astype(np.uint8)


def binarize(
    gray: PixelBuffer,
    method: BinarizationMethod = BinarizationMethod.ADAPTIVE,
    block_size: int = DEFAULT_BLOCK_SIZE,
    offset: int = DEFAULT_OFFSET,
) -> PixelBuffer:
    """Run the selected binarizer."""
    if method is BinarizationMethod.OTSU:
        return otsu_binarize(gray)
    return adaptive_threshold(gray, block_size, offset)
