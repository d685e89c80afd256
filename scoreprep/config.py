"""Call-time configuration for the preprocessing pipeline."""

from dataclasses import dataclass, replace

from scoreprep.models import BinarizationMethod, SharpenMode

DEFAULT_MAX_DIMENSION = 2048
DEFAULT_BLOCK_SIZE = 25
DEFAULT_OFFSET = 10
DEFAULT_CONTRAST = 1.4
DEFAULT_BRIGHTNESS = 10

# Linear sharpen approximation: a stronger contrast boost with a darkening offset
SHARPEN_CONTRAST = 1.5
SHARPEN_BRIGHTNESS = -40


@dataclass(frozen=True)
class PreprocessConfig:
    """
    Pipeline parameters.

    Args:
        max_dimension: Upper bound for the long edge after resizing.
        block_size: Adaptive threshold window size in pixels.
        offset: Amount a pixel must be darker than its local mean to count as ink.
        contrast: Multiplier for the post-binarization contrast stage.
        brightness: Offset added after the contrast multiplier.
        binarization: Which binarizer the pipeline runs.
        sharpen_mode: Linear boost (default) or Gaussian unsharp mask.
        otsu_fallback: Retry with Otsu when adaptive output has no ink.
    """

    max_dimension: int = DEFAULT_MAX_DIMENSION
    block_size: int = DEFAULT_BLOCK_SIZE
    offset: int = DEFAULT_OFFSET
    contrast: float = DEFAULT_CONTRAST
    brightness: float = DEFAULT_BRIGHTNESS
    binarization: BinarizationMethod = BinarizationMethod.ADAPTIVE
    sharpen_mode: SharpenMode = SharpenMode.LINEAR
    otsu_fallback: bool = False

    def __post_init__(self):
        if self.max_dimension < 1:
            raise ValueError(f"max_dimension must be >= 1, got {self.max_dimension}")
        if self.block_size < 1:
            raise ValueError(f"block_size must be >= 1, got {self.block_size}")
        if self.contrast < 0:
            raise ValueError(f"contrast must be >= 0, got {self.contrast}")
        # Accept plain strings for the enum fields
        object.__setattr__(self, "binarization", BinarizationMethod(self.binarization))
        object.__setattr__(self, "sharpen_mode", SharpenMode(self.sharpen_mode))

    def with_overrides(self, **overrides) -> "PreprocessConfig":
        """Return a validated copy with the given fields replaced."""
        return replace(self, **overrides)
