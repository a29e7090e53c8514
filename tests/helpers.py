"""Test doubles for the inference boundary and the image resampler."""
from io import BytesIO

import numpy as np
from PIL import Image


class FakeSession:
    """InferenceBoundary stand-in returning a fixed output and recording inputs."""

    def __init__(self, output, input_shape=(1, 3, 2, 2), input_name="input", output_name="output", error=None):
        self.input_names = [input_name]
        self.output_names = [output_name]
        self.input_shape = list(input_shape)
        self.output = np.asarray(output, dtype=np.float32)
        self.error = error
        self.calls = []

    def run(self, inputs):
        self.calls.append(inputs)
        if self.error is not None:
            raise self.error
        return {self.output_names[0]: self.output}


def nearest_resample(pixels, width, height):
    src_h, src_w = pixels.shape[:2]
    ys = np.arange(height) * src_h // height
    xs = np.arange(width) * src_w // width
    return pixels[ys][:, xs].copy()


def png_bytes(pixels, mode=None):
    image = Image.fromarray(np.asarray(pixels, dtype=np.uint8))
    if mode:
        image = image.convert(mode)
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()
