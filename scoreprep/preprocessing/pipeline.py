"""Preprocessing pipeline for photographed handwritten score sheets."""

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from scoreprep.config import PreprocessConfig
from scoreprep.models import (
    BinarizationMethod,
    Orientation,
    PixelBuffer,
    SharpenMode,
    check_buffer,
)
from scoreprep.preprocessing.filters import (
    enhance_contrast,
    median_filter,
    sharpen,
    to_grayscale,
    unsharp_mask,
)
from scoreprep.preprocessing.geometry import normalize
from scoreprep.preprocessing.threshold import (
    BACKGROUND,
    INK,
    apply_threshold,
    binarize,
    otsu_threshold,
)

logger = logging.getLogger(__name__)

# Share of ink pixels above which the output is probably an inverted or
# underexposed photo rather than handwriting on paper
MAX_INK_RATIO = 0.5

# Mid-gray cut applied after the unsharp mask so the output stays {0, 255}
UNSHARP_SNAP_THRESHOLD = 127


@dataclass
class PipelineDetails:
    """What the pipeline decided while processing one image."""

    binarization: BinarizationMethod
    threshold: Optional[int] = None
    warnings: list[str] = field(default_factory=list)


def preprocess_score_sheet(
    image: PixelBuffer,
    orientation: Orientation = Orientation.NORMAL,
    config: Optional[PreprocessConfig] = None,
) -> tuple[PixelBuffer, PipelineDetails]:
    """
    Turn a photographed score sheet into a clean binary image for OCR.

    Steps:
    1. Orientation correction and resize to config.max_dimension
    2. Grayscale conversion (removes ink colour variance)
    3. 3x3 median denoise
    4. Binarization (adaptive by default, Otsu on request or as fallback)
    5. Contrast enhancement
    6. Sharpening (the unsharp mask is snapped back to {0, 255})

    Each step consumes the previous step's buffer; no intermediate is kept.

    Returns:
        Single-channel image with ink=0, background=255, and the details.

    Raises:
        DimensionError: If the input buffer is degenerate.
    """
    config = config or PreprocessConfig()
    check_buffer(image)

    image = normalize(image, orientation, config.max_dimension)
    gray = median_filter(to_grayscale(image))
    del image

    binary, details = _binarize(gray, config)
    del gray

    enhanced = enhance_contrast(binary, config.contrast, config.brightness)
    del binary

    if config.sharpen_mode is SharpenMode.UNSHARP:
        # The blur leaves gray levels around strokes; snap back to ink/background
        result = apply_threshold(unsharp_mask(enhanced), UNSHARP_SNAP_THRESHOLD)
    else:
        result = sharpen(enhanced)

    details.warnings.extend(check_output(result))
    logger.debug("Pipeline output %dx%d", result.shape[1], result.shape[0])
    return result, details


def _binarize(
    gray: PixelBuffer, config: PreprocessConfig
) -> tuple[PixelBuffer, PipelineDetails]:
    if config.binarization is BinarizationMethod.OTSU:
        threshold = otsu_threshold(gray)
        logger.debug("Otsu threshold: %d", threshold)
        return apply_threshold(gray, threshold), PipelineDetails(
            BinarizationMethod.OTSU, threshold=threshold
        )

    binary = binarize(gray, BinarizationMethod.ADAPTIVE, config.block_size, config.offset)
    details = PipelineDetails(BinarizationMethod.ADAPTIVE)

    if config.otsu_fallback and not (binary == INK).any() and gray.min() != gray.max():
        threshold = otsu_threshold(gray)
        logger.warning(
            "Adaptive threshold found no ink; falling back to Otsu (t=%d)", threshold
        )
        details = PipelineDetails(
            BinarizationMethod.OTSU,
            threshold=threshold,
            warnings=["Adaptive threshold found no ink, used Otsu fallback"],
        )
        binary = apply_threshold(gray, threshold)

    return binary, details


def check_output(binary: PixelBuffer) -> list[str]:
    """Quality warnings for a finished binary image. Never raises."""
    warnings = []
    ink_ratio = float(np.count_nonzero(binary < BACKGROUND)) / binary.size

    if ink_ratio == 0.0:
        warnings.append("No ink detected; the image may be blank or overexposed")
    elif ink_ratio > MAX_INK_RATIO:
        warnings.append(
            f"Ink covers {ink_ratio:.0%} of the image; the photo may be too dark"
        )
    return warnings
