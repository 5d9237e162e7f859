"""Mean and population variance of 8-bit intensities, from a histogram.

Building the histogram is the only step that touches every pixel. Mean and
variance then run over 256 buckets regardless of image size, and the
histogram is left behind for the caller when a buffer is supplied.

An empty histogram (zero-area grid) has no mean or variance; every function
here raises ValueError for it instead of dividing by zero.
"""

import logging

import numpy as np

from stats.grid import as_samples, grid_size
from stats.histogram import (
    HISTOGRAM_SIZE,
    build_histogram,
    count_total,
    validate_histogram,
)

logger = logging.getLogger(__name__)

_LEVELS = np.arange(HISTOGRAM_SIZE, dtype=np.int64)


def _resolve_total(hist: np.ndarray, total: int | None) -> int:
    if total is None:
        total = int(hist.sum())
    if total < 0:
        raise ValueError(f"total sample count must be non-negative, got {total}")
    if total == 0:
        raise ValueError("mean and variance are undefined for an empty histogram")
    return total


def mean(histogram, total: int | None = None) -> float:
    """
    Mean intensity of the samples counted in ``histogram``.

    Args:
        histogram: 256 non-negative integer counts
        total: number of samples; summed from the histogram when omitted

    Raises:
        ValueError: malformed histogram, or a total of zero
    """
    hist = validate_histogram(histogram)
    total = _resolve_total(hist, total)
    # Exact integer weighted sum, one division
    weighted = int(np.dot(_LEVELS, hist))
    return weighted / total


def variance(histogram, mean_value: float, total: int | None = None) -> float:
    """
    Population variance (divide by N) of the samples counted in ``histogram``.

    Args:
        histogram: 256 non-negative integer counts
        mean_value: mean from :func:`mean`
        total: number of samples; summed from the histogram when omitted

    Raises:
        ValueError: malformed histogram, or a total of zero
    """
    hist = validate_histogram(histogram)
    total = _resolve_total(hist, total)
    deviation = _LEVELS.astype(np.float64) - float(mean_value)
    squared = float(np.dot(deviation * deviation, hist.astype(np.float64)))
    return squared / total


def image_mean(grid, histogram=None) -> float:
    """Mean intensity of a grid. ``histogram``, if given, receives the counts."""
    width, height = grid_size(grid)
    hist = build_histogram(grid, out=histogram)
    return mean(hist, width * height)


def image_variance(grid, histogram=None) -> float:
    """Population variance of a grid. ``histogram``, if given, receives the counts."""
    width, height = grid_size(grid)
    num_values = width * height
    hist = build_histogram(grid, out=histogram)
    return variance(hist, mean(hist, num_values), num_values)


def describe(grid) -> dict:
    """
    Histogram, sample count, mean and variance in one call.

    Returns:
        {"width", "height", "count", "mean", "variance", "histogram": [256 ints]}
    """
    width, height = grid_size(grid)
    hist = build_histogram(grid)
    total = count_total(hist)
    mu = mean(hist, total)
    return {
        "width": width,
        "height": height,
        "count": total,
        "mean": mu,
        "variance": variance(hist, mu, total),
        "histogram": hist.tolist(),
    }


def direct_mean(grid) -> float:
    """Mean by summing every sample. Reference for the histogram method."""
    samples = as_samples(grid)
    if samples.size == 0:
        raise ValueError("mean is undefined for an empty grid")
    return float(samples.mean(dtype=np.float64))


def direct_variance(grid, mean_value: float) -> float:
    """Population variance by a second pass over every sample."""
    samples = as_samples(grid)
    if samples.size == 0:
        raise ValueError("variance is undefined for an empty grid")
    deviation = samples.astype(np.float64) - float(mean_value)
    return float(np.mean(deviation * deviation))
