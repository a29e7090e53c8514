"""Small numeric helpers shared by the encoder and the mask decoder."""

from __future__ import annotations

from typing import Tuple

import numpy as np

SCALE_FLOOR = 1e-6


def hwc_offset(c, y, x, width: int, channels: int):
    """Flat offset of (channel, row, column) in an interleaved HWC buffer."""
    return y * width * channels + x * channels + c


def chw_offset(c, y, x, height: int, width: int):
    """Flat offset of (channel, row, column) in a planar CHW buffer."""
    return c * height * width + y * width + x


def hwc_to_chw(buffer: np.ndarray) -> np.ndarray:
    """
    Reorder an (H, W, C) array into (C, H, W) through the offset functions.

    Works on the whole index grid at once; each destination element is
    written exactly once from its source offset.
    """
    height, width, channels = buffer.shape
    c, y, x = np.indices((channels, height, width), sparse=True)
    src = hwc_offset(c, y, x, width, channels)
    dst = chw_offset(c, y, x, height, width)

    flat_src = buffer.reshape(-1)
    out = np.empty(flat_src.size, dtype=buffer.dtype)
    out[dst.reshape(-1)] = flat_src[src.reshape(-1)]
    return out.reshape(channels, height, width)


def scale_divisor(buffer: np.ndarray, floor: float = SCALE_FLOOR) -> float:
    """Largest value in the buffer, never below `floor` (all-black images)."""
    observed = float(buffer.max()) if buffer.size else 0.0
    return max(observed, floor)


def value_range(plane: np.ndarray) -> Tuple[float, float]:
    """(min, max) over the finite values of `plane`; (nan, nan) if none are finite."""
    finite = plane[np.isfinite(plane)]
    if finite.size == 0:
        return float("nan"), float("nan")
    return float(finite.min()), float(finite.max())


def to_unit_bytes(values: np.ndarray) -> np.ndarray:
    """Clamp to [0, 1], scale to [0, 255] and round half up into uint8."""
    values = np.nan_to_num(np.asarray(values, dtype=np.float64), nan=0.0)
    clipped = np.clip(values, 0.0, 1.0)
    return np.floor(clipped * 255.0 + 0.5).astype(np.uint8)


def force_rgb(pixels: np.ndarray) -> np.ndarray:
    """
    Return a 3-channel view/copy of an (H, W, C) uint8 buffer.

    Grey (and grey+alpha) inputs are replicated across R, G and B; channels
    beyond the third are ignored.
    """
    channels = pixels.shape[2]
    if channels >= 3:
        return pixels[:, :, :3]
    grey = pixels[:, :, :1]
    return np.repeat(grey, 3, axis=2)
