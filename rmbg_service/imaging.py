"""
Image decode, resample and PNG encode on top of Pillow.

The pipeline only talks to this module through `decode_image`,
`encode_png` and a resampler callable, so tests can swap in a trivial
nearest-neighbour stub.
"""

from __future__ import annotations

from io import BytesIO
import logging
from pathlib import Path
from typing import Callable, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import ImageDecodeError
from .raster import RasterImage

logger = logging.getLogger(__name__)

# (pixels (H, W, C) uint8, width, height) -> pixels (height, width, C) uint8
Resampler = Callable[[np.ndarray, int, int], np.ndarray]

RESAMPLE_FILTERS = {
    "nearest": Image.NEAREST,
    "bilinear": Image.BILINEAR,
    "bicubic": Image.BICUBIC,
    "lanczos": Image.LANCZOS,
    "box": Image.BOX,
    "hamming": Image.HAMMING,
}

_KEPT_MODES = {"L", "LA", "RGB", "RGBA"}


class PillowResampler:
    """Stretch-fill resize: both axes are scaled independently to the target box."""

    def __init__(self, filter_name: str = "bilinear") -> None:
        if filter_name not in RESAMPLE_FILTERS:
            raise ValueError(
                f"Unknown resample filter '{filter_name}'; expected one of {sorted(RESAMPLE_FILTERS)}"
            )
        self.filter_name = filter_name
        self._filter = RESAMPLE_FILTERS[filter_name]

    def __call__(self, pixels: np.ndarray, width: int, height: int) -> np.ndarray:
        if width <= 0 or height <= 0:
            raise ValueError(f"Target size must be positive, got {width}x{height}")
        src_h, src_w, channels = pixels.shape
        if (src_w, src_h) == (width, height):
            return pixels.copy()

        # Resize plane by plane so any channel count goes through mode "L".
        planes = [
            np.asarray(
                Image.fromarray(np.ascontiguousarray(pixels[:, :, c])).resize(
                    (width, height), self._filter
                )
            )
            for c in range(channels)
        ]
        return np.stack(planes, axis=2)

    def __repr__(self) -> str:
        return f"PillowResampler(filter_name={self.filter_name!r})"


def from_pil(image: Image.Image) -> RasterImage:
    """Convert a Pillow image into a RasterImage, normalising exotic modes."""
    if image.mode == "P":
        image = image.convert("RGBA")
    elif image.mode == "I" or image.mode.startswith("I;16"):
        # 16-bit grey: keep the high byte, convert("L") would clip at 255
        wide = np.clip(np.asarray(image).astype(np.int64), 0, 65535)
        return RasterImage((wide >> 8).astype(np.uint8))
    elif image.mode not in _KEPT_MODES:
        image = image.convert("RGB")
    return RasterImage(np.asarray(image, dtype=np.uint8).copy())


def to_pil(image: RasterImage) -> Image.Image:
    channels = image.channels
    if channels == 1:
        return Image.fromarray(np.ascontiguousarray(image.pixels[:, :, 0]))
    if channels in (3, 4):
        # uint8 (H, W, 3) / (H, W, 4) arrays map to RGB / RGBA
        return Image.fromarray(np.ascontiguousarray(image.pixels))
    raise ValueError(f"Cannot convert a {channels}-channel raster to a Pillow image")


def decode_image(image_bytes: bytes) -> RasterImage:
    """Decode encoded image bytes (PNG, JPEG, WebP, ...) into a RasterImage."""
    try:
        with Image.open(BytesIO(image_bytes)) as image:
            image.load()
            raster = from_pil(image)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageDecodeError("Invalid image data") from exc
    logger.debug("Decoded image %dx%d with %d channels", raster.width, raster.height, raster.channels)
    return raster


def load_image(path: Union[str, Path]) -> RasterImage:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return decode_image(path.read_bytes())


def encode_png(image: RasterImage) -> bytes:
    """Lossless PNG encoding; RGBA rasters keep their alpha channel."""
    buf = BytesIO()
    to_pil(image).save(buf, format="PNG")
    return buf.getvalue()
