"""Grid adapter: normalizes collaborator grids to a 2-D uint8 sample array."""

import logging
import numbers

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


def _is_accessor_grid(grid) -> bool:
    return all(hasattr(grid, attr) for attr in ("width", "height", "get"))


def grid_size(grid) -> tuple[int, int]:
    """Return (width, height) for any accepted grid form."""
    if isinstance(grid, np.ndarray):
        if grid.ndim != 2:
            raise ValueError(f"grid must be 2-D, got shape {grid.shape}")
        height, width = grid.shape
        return int(width), int(height)
    if isinstance(grid, Image.Image) or _is_accessor_grid(grid):
        return int(grid.width), int(grid.height)
    raise TypeError(f"unsupported grid type: {type(grid).__name__}")


def _read_accessor(grid) -> np.ndarray:
    """Single row-major pass over a width/height/get(x, y) grid."""
    width, height = grid_size(grid)
    if width < 0 or height < 0:
        raise ValueError(f"negative grid dimensions: {width}x{height}")
    samples = np.empty((height, width), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            value = grid.get(x, y)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ValueError(f"sample at ({x}, {y}) is not an integer: {value!r}")
            if not 0 <= value <= 255:
                raise ValueError(f"sample at ({x}, {y}) out of 8-bit range: {value}")
            samples[y, x] = value
    return samples


def as_samples(grid) -> np.ndarray:
    """
    Return the grid as a read-only (H, W) uint8 array.

    Accepts a 2-D uint8 ndarray (returned as a view, no copy), a Pillow image
    in mode "L", or any object exposing width, height and get(x, y).
    """
    if isinstance(grid, np.ndarray):
        if grid.ndim != 2:
            raise ValueError(f"grid must be 2-D, got shape {grid.shape}")
        if grid.dtype != np.uint8:
            raise ValueError(f"grid must be uint8, got {grid.dtype}")
        samples = grid.view()
    elif isinstance(grid, Image.Image):
        if grid.mode != "L":
            raise ValueError(f"image must be mode 'L', got '{grid.mode}'")
        samples = np.asarray(grid, dtype=np.uint8)
    elif _is_accessor_grid(grid):
        samples = _read_accessor(grid)
    else:
        raise TypeError(f"unsupported grid type: {type(grid).__name__}")

    samples.flags.writeable = False
    return samples
