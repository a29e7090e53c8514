"""
Tensor encoder: decoded image -> normalized NCHW float32 tensor.

The target size always comes from the model's declared input; the image is
stretched to it on both axes (no letterboxing).
"""

from __future__ import annotations

import logging

import numpy as np

from .imaging import Resampler
from .numeric import force_rgb, hwc_to_chw, scale_divisor
from .raster import NormalizationParams, RasterImage

logger = logging.getLogger(__name__)


def scaled_pixels(image: RasterImage, target_width: int, target_height: int, resampler: Resampler) -> np.ndarray:
    """
    Resize to the target box, drop to RGB and divide by the global maximum.

    Returns an (H, W, 3) float32 array in [0, 1]; the maximum is exactly 1
    unless the resized image is entirely black, in which case it is all 0.
    """
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"Target size must be positive, got {target_width}x{target_height}")

    resized = resampler(image.pixels, target_width, target_height)
    rgb = force_rgb(resized).astype(np.float32)
    divisor = scale_divisor(rgb)
    return rgb / np.float32(divisor)


def encode(
    image: RasterImage,
    target_width: int,
    target_height: int,
    params: NormalizationParams,
    resampler: Resampler,
) -> np.ndarray:
    """Build the [1, 3, target_height, target_width] model input for `image`."""
    scaled = scaled_pixels(image, target_width, target_height, resampler)

    mean = np.asarray(params.mean, dtype=np.float32)
    std = np.asarray(params.std, dtype=np.float32)
    chw = hwc_to_chw(scaled)
    normalized = (chw - mean[:, None, None]) / std[:, None, None]

    tensor = normalized.astype(np.float32).reshape(1, 3, target_height, target_width)
    logger.debug(
        "Encoded %dx%d image into tensor %s (range %.4f..%.4f)",
        image.width,
        image.height,
        tensor.shape,
        float(tensor.min()),
        float(tensor.max()),
    )
    return tensor
