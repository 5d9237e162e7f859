"""Histogram utility: 256-bucket intensity histogram of an 8-bit grid."""

import logging

import numpy as np

from stats.grid import as_samples

logger = logging.getLogger(__name__)

HISTOGRAM_SIZE = 256


def validate_histogram(histogram) -> np.ndarray:
    """
    Check a histogram at the boundary and return it as an int64 array.

    Raises:
        ValueError: not 1-D, not 256 buckets, non-integer or negative counts.
    """
    hist = np.asarray(histogram)
    if hist.ndim != 1:
        raise ValueError(f"histogram must be 1-D, got shape {hist.shape}")
    if hist.shape[0] != HISTOGRAM_SIZE:
        raise ValueError(
            f"histogram must have {HISTOGRAM_SIZE} buckets, got {hist.shape[0]}"
        )
    if hist.dtype == np.bool_ or not np.issubdtype(hist.dtype, np.integer):
        raise ValueError(f"histogram counts must be integers, got {hist.dtype}")
    if (hist < 0).any():
        raise ValueError("histogram counts must be non-negative")
    return hist.astype(np.int64, copy=False)


def _check_buffer(out) -> None:
    if isinstance(out, list):
        if len(out) != HISTOGRAM_SIZE:
            raise ValueError(
                f"histogram buffer must have {HISTOGRAM_SIZE} entries, got {len(out)}"
            )
        return
    if not isinstance(out, np.ndarray):
        raise ValueError(
            f"histogram buffer must be a list or ndarray, got {type(out).__name__}"
        )
    if out.shape != (HISTOGRAM_SIZE,):
        raise ValueError(
            f"histogram buffer must have shape ({HISTOGRAM_SIZE},), got {out.shape}"
        )
    if out.dtype == np.bool_ or not np.issubdtype(out.dtype, np.integer):
        raise ValueError(f"histogram buffer must be an integer array, got {out.dtype}")
    if not out.flags.writeable:
        raise ValueError("histogram buffer is read-only")


def build_histogram(grid, out=None):
    """
    Count samples per intensity in one pass over the grid.

    Args:
        grid: (H, W) uint8 array, mode "L" Pillow image, or width/height/get grid
        out: optional 256-entry list or integer ndarray, overwritten in place;
            an ndarray whose dtype cannot hold the largest count raises ValueError

    Returns:
        ``out`` when given, otherwise a new int64 array of 256 counts.
        A zero-area grid yields all zeros.
    """
    if out is not None:
        _check_buffer(out)

    samples = as_samples(grid)
    counts = np.bincount(samples.ravel(), minlength=HISTOGRAM_SIZE)[:HISTOGRAM_SIZE]
    counts = counts.astype(np.int64, copy=False)
    logger.debug("Histogram built from %d samples", samples.size)

    if out is None:
        return counts
    if isinstance(out, np.ndarray):
        capacity = np.iinfo(out.dtype).max
        if counts.max() > capacity:
            raise ValueError(
                f"histogram buffer dtype {out.dtype} cannot hold a count of "
                f"{int(counts.max())} (max {capacity})"
            )
    if isinstance(out, list):
        out[:] = counts.tolist()
    else:
        out[:] = counts
    return out


def count_total(histogram) -> int:
    """Sum of all 256 bucket counts."""
    return int(validate_histogram(histogram).sum())
