"""Tests for image loading into 8-bit grids."""

import numpy as np
import pytest
from PIL import Image

from image_io import load_gray
from stats import image_mean, image_variance


@pytest.mark.smoke
def test_gray_png_round_trip(image_file, grid_2x2):
    path = image_file(grid_2x2)
    samples = load_gray(path)
    assert samples.dtype == np.uint8
    np.testing.assert_array_equal(samples, grid_2x2)
    assert image_mean(samples) == 25.0
    assert image_variance(samples) == 125.0


def test_rgb_converted_to_gray(image_file):
    """Equal R, G, B channels convert to that same gray level."""
    rgb = np.full((8, 6, 3), 90, dtype=np.uint8)
    samples = load_gray(image_file(rgb))
    assert samples.shape == (8, 6)
    assert (samples == 90).all()


def test_rgba_converted_to_gray(tmp_path):
    path = tmp_path / "rgba.png"
    Image.new("RGBA", (5, 4), (0, 0, 0, 255)).save(path)
    samples = load_gray(str(path))
    assert samples.shape == (4, 5)
    assert samples.max() == 0


def test_result_is_writable_copy(image_file, grid_2x2):
    samples = load_gray(image_file(grid_2x2))
    samples[0, 0] = 0
    assert samples[0, 0] == 0


def test_missing_file(tmp_path):
    with pytest.raises(ValueError, match="not found"):
        load_gray(str(tmp_path / "nope.png"))


def test_disallowed_extension(tmp_path):
    f = tmp_path / "notes.txt"
    f.write_text("hello")
    with pytest.raises(ValueError, match="not allowed"):
        load_gray(str(f))


def test_corrupt_image(tmp_path):
    f = tmp_path / "broken.png"
    f.write_bytes(b"not really a png")
    with pytest.raises(OSError):
        load_gray(str(f))


def test_dimension_cap(image_file, grid_2x2, monkeypatch):
    monkeypatch.setattr("image_io.validate_dimensions", lambda w, h: ["Image exceeds maximum"])
    with pytest.raises(ValueError, match="exceeds maximum"):
        load_gray(image_file(grid_2x2))
