"""Histogram-based intensity statistics for 8-bit grayscale grids."""

from stats.grid import as_samples, grid_size
from stats.histogram import (
    HISTOGRAM_SIZE,
    build_histogram,
    count_total,
    validate_histogram,
)
from stats.moments import (
    describe,
    direct_mean,
    direct_variance,
    image_mean,
    image_variance,
    mean,
    variance,
)

__all__ = [
    "HISTOGRAM_SIZE",
    "as_samples",
    "build_histogram",
    "count_total",
    "describe",
    "direct_mean",
    "direct_variance",
    "grid_size",
    "image_mean",
    "image_variance",
    "mean",
    "validate_histogram",
    "variance",
]
