"""Public API for score-sheet preprocessing."""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from scoreprep.codec import decode_image, encode_png, read_orientation
from scoreprep.config import PreprocessConfig
from scoreprep.errors import PreprocessError
from scoreprep.models import Orientation, PreprocessResult, ScoreRow
from scoreprep.preprocessing.pipeline import preprocess_score_sheet
from scoreprep.recognition.base import BaseScoreRecognizer

logger = logging.getLogger(__name__)


class ScoreSheetPreprocessor:
    """
    Main entry point for preparing score-sheet photos for OCR.

    Usage:
        preprocessor = ScoreSheetPreprocessor(max_dimension=1600)
        result = preprocessor.preprocess(photo_bytes)
        if result.ok:
            upload(result.data)
    """

    def __init__(self, config: Optional[PreprocessConfig] = None, **overrides):
        """
        Initialize the preprocessor.

        Args:
            config: Pipeline parameters (defaults to PreprocessConfig()).
            **overrides: Individual PreprocessConfig fields to replace,
                e.g. block_size=31 or binarization="otsu".
        """
        config = config or PreprocessConfig()
        self.config = config.with_overrides(**overrides) if overrides else config

    def preprocess(
        self, raw: bytes, orientation_hint: Optional[Orientation] = None
    ) -> PreprocessResult:
        """
        Decode, clean up and re-encode a photographed score sheet.

        Args:
            raw: JPEG/PNG bytes from the camera or gallery.
            orientation_hint: Orientation from the caller's metadata. When
                None it is read from the image's EXIF data.

        Returns:
            PreprocessResult. On failure ok is False and data is empty.
        """
        orientation = orientation_hint
        try:
            image = decode_image(raw)
            if orientation is None:
                orientation = read_orientation(raw)
            binary, details = preprocess_score_sheet(image, orientation, self.config)
            data = encode_png(binary)
        except PreprocessError as e:
            logger.warning("Preprocessing failed (%s): %s", e.code, e)
            return PreprocessResult.failure(e.code, str(e))

        return PreprocessResult(
            ok=True,
            data=data,
            width=binary.shape[1],
            height=binary.shape[0],
            orientation=orientation,
            binarization=details.binarization,
            threshold=details.threshold,
            warnings=details.warnings,
        )

    def preprocess_file(
        self, image_path: str | Path, orientation_hint: Optional[Orientation] = None
    ) -> PreprocessResult:
        """
        Preprocess an image file.

        Raises:
            FileNotFoundError: If the image file doesn't exist.
        """
        image_path = Path(image_path)
        if not image_path.exists():
            raise FileNotFoundError(f"Image not found: {image_path}")
        return self.preprocess(image_path.read_bytes(), orientation_hint)

    def preprocess_array(
        self, image: np.ndarray, orientation: Orientation = Orientation.NORMAL
    ) -> np.ndarray:
        """
        Run the pixel pipeline on an already decoded BGR, BGRA or gray array.

        Raises:
            DimensionError: If the array is empty or has an unsupported shape.
        """
        binary, _ = preprocess_score_sheet(image, orientation, self.config)
        return binary

    def recognize(
        self,
        raw: bytes,
        recognizer: BaseScoreRecognizer,
        orientation_hint: Optional[Orientation] = None,
    ) -> list[ScoreRow]:
        """
        Preprocess a photo and hand the result to an OCR collaborator.

        Returns an empty list when the photo could not be preprocessed, so the
        caller can prompt for a retake or manual entry.
        """
        result = self.preprocess(raw, orientation_hint)
        if not result.ok:
            return []
        logger.debug("Sending %d bytes to %s", len(result.data), recognizer.name)
        return recognizer.recognize(result.data)


def preprocess(
    raw: bytes,
    orientation_hint: Optional[Orientation] = None,
    config: Optional[PreprocessConfig] = None,
) -> PreprocessResult:
    """Preprocess raw image bytes with the given (or default) configuration."""
    return ScoreSheetPreprocessor(config).preprocess(raw, orientation_hint)
