"""
ONNX background removal service package.

Exposes the tensor encoder, the mask decoder/compositor, the pipeline that
ties them around an inference session, and the FastAPI application.
"""

from .errors import BackgroundRemovalError, ImageDecodeError, MetadataError, ModelLoadError
from .pipeline import BackgroundRemover
from .raster import NormalizationParams, RasterImage

__all__ = [
    "BackgroundRemovalError",
    "BackgroundRemover",
    "ImageDecodeError",
    "MetadataError",
    "ModelLoadError",
    "NormalizationParams",
    "RasterImage",
]
