import os

import numpy as np
import pytest

# api.py reads settings at import time
os.environ.setdefault("RMBG_MODEL_PATH", "/tmp/rmbg-test-model.onnx")

from rmbg_service.config import get_settings  # noqa: E402
from rmbg_service.pipeline import BackgroundRemover  # noqa: E402
from rmbg_service.raster import RasterImage  # noqa: E402

from .helpers import FakeSession, nearest_resample  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def gradient_output():
    return np.array([0.0, 0.5, 0.5, 1.0], dtype=np.float32).reshape(1, 1, 2, 2)


@pytest.fixture
def gray_image():
    return RasterImage(np.full((4, 4, 3), 128, dtype=np.uint8))


@pytest.fixture
def fake_session(gradient_output):
    return FakeSession(gradient_output)


@pytest.fixture
def remover(fake_session):
    return BackgroundRemover(fake_session, mean=(0.0, 0.0, 0.0), std=(1.0, 1.0, 1.0), resampler=nearest_resample)
