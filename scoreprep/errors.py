"""Exceptions raised by the preprocessing pipeline."""


class PreprocessError(Exception):
    """Base class for failures that abort a preprocessing run."""

    code = "PREPROCESS_FAILED"


class DecodeError(PreprocessError):
    """Input bytes could not be decoded as an image."""

    code = "DECODE_FAILED"


class DimensionError(PreprocessError):
    """Buffer has zero width/height or an unsupported shape."""

    code = "INVALID_DIMENSIONS"


class EncodeError(PreprocessError):
    """The lossless encoder rejected the final buffer."""

    code = "ENCODE_FAILED"
