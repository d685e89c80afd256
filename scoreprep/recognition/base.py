"""Abstract base class for score-sheet OCR collaborators."""

from abc import ABC, abstractmethod

from scoreprep.models import ScoreRow


class BaseScoreRecognizer(ABC):
    """Interface for services that read score rows from a preprocessed image."""

    @abstractmethod
    def recognize(self, image_bytes: bytes) -> list[ScoreRow]:
        """
        Recognize player rows in a preprocessed score sheet.

        Args:
            image_bytes: Lossless PNG of the binarized sheet (ink=0, bg=255).

        Returns:
            List of ScoreRow, ordered top to bottom.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Recognizer identifier name."""
