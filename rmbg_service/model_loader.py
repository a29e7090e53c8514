"""
Model loading utilities for the ONNX segmentation model.

The loader:
 - opens the model at `RMBG_MODEL_PATH` with onnxruntime,
 - keeps a single shared session per process,
 - exposes `get_session()` for inference callers.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

import onnxruntime as ort

from . import config
from .errors import ModelLoadError
from .session import OnnxSession

logger = logging.getLogger(__name__)

_SESSION: Optional[OnnxSession] = None
_LOCK = Lock()


def _session_options(settings: config.Settings) -> ort.SessionOptions:
    options = ort.SessionOptions()
    if settings.intra_op_num_threads > 0:
        options.intra_op_num_threads = settings.intra_op_num_threads
    return options


def _load_session(settings: config.Settings) -> OnnxSession:
    model_path = settings.model_path
    if not model_path.exists():
        raise ModelLoadError(f"ONNX model not found at {model_path}")

    available = ort.get_available_providers()
    providers = [p for p in settings.providers if p in available]
    if not providers:
        logger.warning(
            "None of the configured providers %s are available (have %s); using CPU",
            settings.providers,
            available,
        )
        providers = ["CPUExecutionProvider"]

    try:
        raw = ort.InferenceSession(str(model_path), _session_options(settings), providers=providers)
    except Exception as exc:  # noqa: BLE001
        raise ModelLoadError(f"Failed to load ONNX model from {model_path}: {exc}") from exc

    session = OnnxSession(raw, fallback_input_size=settings.fallback_input_size)
    logger.info(
        "Loaded %s with providers %s; inputs=%s shape=%s outputs=%s",
        model_path,
        raw.get_providers(),
        session.input_names,
        session.input_shape,
        session.output_names,
    )
    return session


def get_session() -> OnnxSession:
    """
    Return the process-wide inference session.

    The model is loaded once on first access and reused across requests or
    batch jobs; onnxruntime allows concurrent `run` calls on it.
    """
    global _SESSION
    if _SESSION is not None:
        return _SESSION

    with _LOCK:
        if _SESSION is None:
            _SESSION = _load_session(config.get_settings())
    return _SESSION


def reset_session() -> None:
    """Drop the cached session so the next `get_session()` reloads it."""
    global _SESSION
    with _LOCK:
        _SESSION = None
