"""
In-memory image and normalization types shared by the encoder and decoder.

Pixels are kept as numpy arrays in HWC layout (row-major, channels
interleaved, one uint8 per channel) so they convert to and from Pillow
without copies of intermediate formats.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


@dataclass
class RasterImage:
    pixels: np.ndarray  # (H, W, C) uint8

    def __post_init__(self) -> None:
        pixels = np.asarray(self.pixels)
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        if pixels.ndim != 3:
            raise ValueError(f"RasterImage expects (H, W, C) pixels, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"RasterImage expects uint8 pixels, got {pixels.dtype}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError("RasterImage cannot be empty")
        self.pixels = pixels

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), matching Pillow's convention."""
        return self.width, self.height


def _as_triple(values: Sequence[float], name: str) -> Tuple[float, float, float]:
    triple = tuple(float(v) for v in values)
    if len(triple) != 3:
        raise ValueError(f"{name} must have exactly 3 values (R, G, B), got {len(triple)}")
    return triple  # type: ignore[return-value]


@dataclass(frozen=True)
class NormalizationParams:
    """Per-channel mean/std applied after scaling pixels into [0, 1]."""

    mean: Tuple[float, float, float]
    std: Tuple[float, float, float]

    def __post_init__(self) -> None:
        mean = _as_triple(self.mean, "mean")
        std = _as_triple(self.std, "std")
        if any(s == 0.0 for s in std):
            raise ValueError("std values must be non-zero")
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "std", std)

    @classmethod
    def identity(cls) -> "NormalizationParams":
        return cls(mean=(0.0, 0.0, 0.0), std=(1.0, 1.0, 1.0))
