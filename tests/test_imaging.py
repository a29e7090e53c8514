from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from rmbg_service.errors import ImageDecodeError
from rmbg_service.imaging import PillowResampler, decode_image, encode_png, load_image
from rmbg_service.raster import RasterImage

from .helpers import png_bytes


def test_decode_keeps_rgb_and_grey():
    rgb = decode_image(png_bytes(np.zeros((3, 5, 3))))
    assert (rgb.width, rgb.height, rgb.channels) == (5, 3, 3)

    grey = decode_image(png_bytes(np.zeros((3, 5))))
    assert grey.channels == 1


def test_decode_palette_image_as_rgba():
    data = png_bytes(np.full((2, 2, 3), 30), mode="P")
    assert decode_image(data).channels == 4


def test_decode_jpeg_cmyk_as_rgb():
    buf = BytesIO()
    Image.new("CMYK", (4, 2), (0, 0, 0, 0)).save(buf, format="JPEG")
    assert decode_image(buf.getvalue()).channels == 3


def test_decode_garbage_raises():
    with pytest.raises(ImageDecodeError):
        decode_image(b"\x89PNG not really")
    with pytest.raises(ValueError):
        decode_image(b"")


def test_decode_oversized_image_raises(monkeypatch):
    data = png_bytes(np.zeros((20, 20)))
    # 400 pixels is over twice the limit, which Pillow treats as a bomb
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    with pytest.raises(ImageDecodeError):
        decode_image(data)


def test_decode_16bit_grey_keeps_levels():
    levels = (np.arange(16, dtype=np.uint16) * 4369).reshape(4, 4)
    buf = BytesIO()
    Image.fromarray(levels).save(buf, format="PNG")

    raster = decode_image(buf.getvalue())

    assert raster.channels == 1
    assert len(np.unique(raster.pixels)) == 16
    np.testing.assert_array_equal(raster.pixels[:, :, 0], levels >> 8)


def test_load_image_reads_file(tmp_path):
    path = tmp_path / "in.png"
    path.write_bytes(png_bytes(np.full((3, 2, 3), 40)))
    raster = load_image(path)
    assert raster.size == (2, 3)
    assert np.all(raster.pixels == 40)


def test_load_image_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_image(tmp_path / "missing.png")


def test_encode_png_preserves_alpha():
    pixels = np.zeros((2, 3, 4), dtype=np.uint8)
    pixels[:, :, 3] = [[0, 128, 255], [1, 2, 3]]
    data = encode_png(RasterImage(pixels))
    with Image.open(BytesIO(data)) as image:
        assert image.mode == "RGBA"
        np.testing.assert_array_equal(np.asarray(image)[:, :, 3], pixels[:, :, 3])


def test_resampler_stretches_each_axis_independently():
    pixels = np.zeros((10, 2, 2), dtype=np.uint8)
    out = PillowResampler("bilinear")(pixels, 8, 3)
    assert out.shape == (3, 8, 2)
    assert out.dtype == np.uint8


def test_resampler_same_size_returns_copy():
    pixels = np.ones((2, 2, 3), dtype=np.uint8)
    out = PillowResampler()(pixels, 2, 2)
    out[0, 0, 0] = 9
    assert pixels[0, 0, 0] == 1


def test_resampler_rejects_unknown_filter():
    with pytest.raises(ValueError):
        PillowResampler("sinc")
