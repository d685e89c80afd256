"""Data models for score-sheet preprocessing."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from scoreprep.errors import DimensionError

# uint8 array, (h, w) for single channel or (h, w, 3|4) in BGR/BGRA order
PixelBuffer = np.ndarray

# int64 array of shape (h + 1, w + 1); row 0 and column 0 are zero
IntegralTable = np.ndarray

SUPPORTED_CHANNELS = (1, 3, 4)

EXIF_ORIENTATION_TAG = 0x0112


class Orientation(Enum):
    """Image orientation, valued by the EXIF orientation tag code."""

    NORMAL = 1
    FLIP_HORIZONTAL = 2
    ROTATE_180 = 3
    FLIP_VERTICAL = 4
    ROTATE_90 = 6  # clockwise
    ROTATE_270 = 8

    @classmethod
    def from_exif(cls, value) -> "Orientation":
        """Map an EXIF tag value to an Orientation, NORMAL when unknown."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.NORMAL


class BinarizationMethod(Enum):
    ADAPTIVE = "adaptive"
    OTSU = "otsu"


class SharpenMode(Enum):
    LINEAR = "linear"
    UNSHARP = "unsharp"


def buffer_shape(buf: PixelBuffer) -> tuple[int, int, int]:
    """Return (width, height, channels) of a pixel buffer."""
    if buf.ndim == 2:
        return buf.shape[1], buf.shape[0], 1
    return buf.shape[1], buf.shape[0], buf.shape[2]


def check_buffer(buf: PixelBuffer) -> PixelBuffer:
    """Validate a pixel buffer, raising DimensionError when it is degenerate."""
    if not isinstance(buf, np.ndarray):
        raise DimensionError(f"Expected a numpy array, got {type(buf).__name__}")
    if buf.dtype != np.uint8:
        raise DimensionError(f"Expected uint8 samples, got {buf.dtype}")
    if buf.ndim not in (2, 3):
        raise DimensionError(f"Unsupported buffer rank: {buf.ndim}")

    width, height, channels = buffer_shape(buf)
    if channels not in SUPPORTED_CHANNELS:
        raise DimensionError(f"Unsupported channel count: {channels}")
    if width == 0 or height == 0:
        raise DimensionError(f"Degenerate buffer: {width}x{height}")
    return buf


@dataclass
class ScoreRow:
    """One recognized row of a handwritten score sheet."""

    player_name: str
    scores: list[int] = field(default_factory=list)
    confidence: float = 0.0  # 0.0 to 1.0

    @property
    def total(self) -> int:
        return sum(self.scores)

    def to_dict(self) -> dict:
        return {
            "player_name": self.player_name,
            "scores": list(self.scores),
            "total": self.total,
            "confidence": round(self.confidence, 4),
        }


@dataclass
class PreprocessResult:
    """Outcome of one preprocessing run.

    On failure ``ok`` is False, ``data`` is empty and ``error`` carries the
    error code. Partially processed output is never returned.
    """

    ok: bool
    data: bytes = b""
    width: int = 0
    height: int = 0
    orientation: Orientation = Orientation.NORMAL
    binarization: Optional[BinarizationMethod] = None
    threshold: Optional[int] = None
    error: Optional[str] = None
    message: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, code: str, message: str) -> "PreprocessResult":
        return cls(ok=False, error=code, message=message)

    def to_dict(self) -> dict:
        d = {
            "ok": self.ok,
            "byte_count": len(self.data),
            "width": self.width,
            "height": self.height,
            "orientation": self.orientation.name.lower(),
            "binarization": self.binarization.value if self.binarization else None,
            "warnings": self.warnings,
        }
        if self.threshold is not None:
            d["threshold"] = self.threshold
        if self.error:
            d["error"] = self.error
            d["message"] = self.message
        return d
