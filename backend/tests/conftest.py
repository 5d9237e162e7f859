import numpy as np
import pytest
from PIL import Image


class AccessorGrid:
    """Grid exposing width, height and get(x, y), like an external image type."""

    def __init__(self, rows: list[list[int]]):
        self._rows = rows
        self.height = len(rows)
        self.width = len(rows[0]) if rows else 0

    def get(self, x: int, y: int) -> int:
        return self._rows[y][x]


@pytest.fixture
def grid_2x2():
    """2x2 grid with values 10, 20, 30, 40 (mean 25, variance 125)."""
    return np.array([[10, 20], [30, 40]], dtype=np.uint8)


@pytest.fixture
def random_grid():
    """Deterministic 480x640 uint8 grid."""
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, (480, 640), dtype=np.uint8)


@pytest.fixture
def accessor_grid():
    return AccessorGrid([[10, 20], [30, 40]])


@pytest.fixture
def image_file(tmp_path):
    """Write a grayscale or RGB array to a PNG under tmp_path. Returns the path."""

    def _write(array: np.ndarray, name: str = "image.png") -> str:
        path = tmp_path / name
        Image.fromarray(array).save(path)
        return str(path)

    return _write
