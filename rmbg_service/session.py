"""
Inference boundary: the narrow contract the pipeline needs from a model runtime.

`OnnxSession` adapts `onnxruntime.InferenceSession`; anything else exposing
the same four members (names, declared input shape, `run`) can stand in,
which is how the tests drive the pipeline without a real model.

Concurrency: the pipeline itself holds no mutable state, but concurrent
`run` calls are only safe if the wrapped runtime allows them.
onnxruntime sessions do; custom implementations must say so themselves.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import numpy as np

from .errors import MetadataError

logger = logging.getLogger(__name__)


class InferenceBoundary(Protocol):
    @property
    def input_names(self) -> List[str]: ...

    @property
    def output_names(self) -> List[str]: ...

    @property
    def input_shape(self) -> Sequence[Any]:
        """Declared shape of the first input, nominally [N, C, H, W]."""
        ...

    def run(self, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]: ...


def input_size(session: InferenceBoundary) -> Tuple[int, int]:
    """
    Validate the session's declared input and return its (height, width).

    Fails before any image work is done when the model does not take a
    single 3-channel NCHW image.
    """
    shape = list(session.input_shape)
    if len(shape) != 4:
        raise MetadataError(f"Model input must be 4-dimensional [N, C, H, W], got {shape}")
    _, channels, height, width = shape
    if channels != 3:
        raise MetadataError(f"Model input must have 3 channels, got {channels}")
    if not _is_static_dim(height) or not _is_static_dim(width):
        raise MetadataError(f"Model input has non-static spatial dims {shape}")
    return int(height), int(width)


def _is_static_dim(dim: Any) -> bool:
    return isinstance(dim, (int, np.integer)) and not isinstance(dim, bool) and dim > 0


class OnnxSession:
    """Expose an onnxruntime session through the InferenceBoundary contract."""

    def __init__(self, session: Any, fallback_input_size: Optional[Tuple[int, int]] = None) -> None:
        self._session = session
        self._inputs = session.get_inputs()
        self._outputs = session.get_outputs()
        if not self._inputs or not self._outputs:
            raise MetadataError("Model must declare at least one input and one output")
        self.fallback_input_size = fallback_input_size

    @property
    def input_names(self) -> List[str]:
        return [meta.name for meta in self._inputs]

    @property
    def output_names(self) -> List[str]:
        return [meta.name for meta in self._outputs]

    @property
    def input_shape(self) -> List[Any]:
        shape = list(self._inputs[0].shape)
        if len(shape) != 4:
            return shape
        # Dynamic exports declare symbolic names (or None) for H/W.
        if self.fallback_input_size and not (_is_static_dim(shape[2]) and _is_static_dim(shape[3])):
            height, width = self.fallback_input_size
            logger.debug("Input %s has dynamic dims %s; using %dx%d", self._inputs[0].name, shape, width, height)
            shape[2], shape[3] = height, width
        return shape

    def run(self, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        outputs = self._session.run(self.output_names, inputs)
        return dict(zip(self.output_names, outputs))
