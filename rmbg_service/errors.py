"""Exceptions raised by the background removal pipeline."""


class BackgroundRemovalError(Exception):
    """Base exception for all pipeline errors."""


class MetadataError(BackgroundRemovalError):
    """Raised when the model declares shapes the pipeline cannot feed.

    Typical causes: input rank other than 4, channel count other than 3,
    symbolic spatial dims without a configured fallback.
    """


class ImageDecodeError(BackgroundRemovalError, ValueError):
    """Raised when the input bytes cannot be decoded into an image."""


class ModelLoadError(BackgroundRemovalError):
    """Raised when the ONNX model cannot be loaded."""
