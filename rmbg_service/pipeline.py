"""
High-level background removal pipeline.

`BackgroundRemover` wraps one inference session with the encoder and the
mask decoder. `process_image_bytes` is the bytes-level entry point used by
the batch worker:
bytes in -> decode -> encode -> model -> mask + composite -> RGBA PNG bytes out.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Optional, Sequence

import numpy as np

from . import config
from .decoder import DEFAULT_FLAT_VALUE, decode
from .encoder import encode
from .imaging import PillowResampler, Resampler, decode_image, encode_png
from .model_loader import get_session
from .raster import NormalizationParams, RasterImage
from .session import InferenceBoundary, input_size

logger = logging.getLogger(__name__)


class BackgroundRemover:
    """
    Stateless between calls: the same instance can serve concurrent requests
    as long as `session.run` itself may be called concurrently.
    """

    def __init__(
        self,
        session: InferenceBoundary,
        mean: Sequence[float],
        std: Sequence[float],
        resampler: Optional[Resampler] = None,
        flat_value: float = DEFAULT_FLAT_VALUE,
    ) -> None:
        self.session = session
        self.params = NormalizationParams(mean=tuple(mean), std=tuple(std))
        self.resampler = resampler or PillowResampler()
        self.flat_value = flat_value

    def build_input_tensor(self, image: RasterImage) -> np.ndarray:
        """Encode `image` for the session's declared input without running it."""
        height, width = input_size(self.session)
        return encode(image, width, height, self.params, self.resampler)

    def produce_masked_image(self, image: RasterImage) -> RasterImage:
        """Run the model on `image` and return it as RGBA with the predicted alpha."""
        height, width = input_size(self.session)
        input_name = self.session.input_names[0]
        output_name = self.session.output_names[0]
        original_width, original_height = image.width, image.height

        tensor = encode(image, width, height, self.params, self.resampler)
        outputs = self.session.run({input_name: tensor})
        raw = outputs[output_name]
        logger.debug("Model output %s shape=%s", output_name, np.shape(raw))

        return decode(
            raw,
            original_width,
            original_height,
            image,
            self.resampler,
            flat_value=self.flat_value,
        )


_REMOVER: Optional[BackgroundRemover] = None
_LOCK = Lock()


def get_remover() -> BackgroundRemover:
    """Return the process-wide remover built from settings and the cached session."""
    global _REMOVER
    if _REMOVER is not None:
        return _REMOVER

    with _LOCK:
        if _REMOVER is None:
            settings = config.get_settings()
            params = config.normalization_params(settings)
            _REMOVER = BackgroundRemover(
                get_session(),
                mean=params.mean,
                std=params.std,
                resampler=PillowResampler(settings.resample_filter),
                flat_value=settings.degenerate_fill,
            )
    return _REMOVER


def process_image_bytes(image_bytes: bytes, remover: Optional[BackgroundRemover] = None) -> bytes:
    """
    Full pipeline from encoded image bytes to RGBA PNG bytes.

    Raises:
        ImageDecodeError: when the input is not a decodable image.
        MetadataError: when the model's declared input cannot be fed.
    """
    remover = remover or get_remover()
    image = decode_image(image_bytes)
    masked = remover.produce_masked_image(image)
    return encode_png(masked)
