"""
Mask decoder and compositor: raw model output -> RGBA image.

The model's single-channel prediction is min/max rescaled into [0, 1],
quantised to bytes at the model's native resolution, stretched back to the
original image size and attached as its alpha channel.
"""

from __future__ import annotations

import logging

import numpy as np

from .errors import MetadataError
from .imaging import Resampler
from .numeric import force_rgb, to_unit_bytes, value_range
from .raster import RasterImage

logger = logging.getLogger(__name__)

DEFAULT_FLAT_VALUE = 0.5


def first_plane(raw: np.ndarray) -> np.ndarray:
    """First channel plane of an [N, C, H', W'] output as a float32 (H', W') array."""
    raw = np.asarray(raw)
    if raw.ndim < 2:
        raise MetadataError(f"Model output must have at least 2 dims, got shape {raw.shape}")
    height, width = raw.shape[-2], raw.shape[-1]
    return raw.reshape(-1)[: height * width].reshape(height, width).astype(np.float32)


def rescale(plane: np.ndarray, flat_value: float = DEFAULT_FLAT_VALUE) -> np.ndarray:
    """
    Min/max rescale `plane` into [0, 1].

    A uniform plane has no range to stretch; every value then becomes
    `flat_value` instead of 0/0.
    """
    lo, hi = value_range(plane)
    span = hi - lo
    if not np.isfinite(span) or span == 0.0:
        logger.warning(
            "Model output has a degenerate range (min=%s, max=%s); using flat mask %.3f",
            lo,
            hi,
            flat_value,
        )
        return np.full(plane.shape, flat_value, dtype=np.float32)
    # float64 so extreme float32 outputs cannot overflow the subtraction
    return ((plane.astype(np.float64) - lo) / span).astype(np.float32)


def alpha_mask(raw: np.ndarray, flat_value: float = DEFAULT_FLAT_VALUE) -> np.ndarray:
    """uint8 (H', W') mask at the model's native output resolution."""
    return to_unit_bytes(rescale(first_plane(raw), flat_value))


def composite(original: RasterImage, mask: np.ndarray) -> RasterImage:
    """Return a new RGBA image: `original` as RGB with `mask` as its alpha."""
    if mask.shape != (original.height, original.width):
        raise ValueError(
            f"Mask shape {mask.shape} does not match image size {original.height}x{original.width}"
        )
    rgb = force_rgb(original.pixels)
    rgba = np.empty((original.height, original.width, 4), dtype=np.uint8)
    rgba[:, :, :3] = rgb
    rgba[:, :, 3] = mask
    return RasterImage(rgba)


def decode(
    raw: np.ndarray,
    original_width: int,
    original_height: int,
    original_image: RasterImage,
    resampler: Resampler,
    flat_value: float = DEFAULT_FLAT_VALUE,
) -> RasterImage:
    mask = alpha_mask(raw, flat_value)
    resized = resampler(mask[:, :, np.newaxis], original_width, original_height)[:, :, 0]
    logger.debug(
        "Resized mask %dx%d -> %dx%d",
        mask.shape[1],
        mask.shape[0],
        original_width,
        original_height,
    )
    return composite(original_image, resized)
