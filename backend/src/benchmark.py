"""Measurement harness: times the direct and histogram methods side by side.

Direct method: one pass for the mean, a second pass for the variance, both
over every pixel. Histogram method: one pass to build 256 buckets, then mean
and variance over the buckets only.

All timings use time.perf_counter_ns() and report the best of ``repeat`` runs.
"""

import logging
import math
import time

from stats import direct_mean, direct_variance
from stats.grid import as_samples
from stats.histogram import build_histogram, count_total
from stats.moments import mean, variance

logger = logging.getLogger(__name__)

DEFAULT_REPEAT = 5
AGREEMENT_REL_TOL = 1e-9


def time_call(fn, *args, repeat: int = DEFAULT_REPEAT):
    """Call ``fn(*args)`` ``repeat`` times. Returns (last result, best elapsed ns)."""
    if repeat < 1:
        raise ValueError(f"repeat must be >= 1, got {repeat}")
    best = None
    result = None
    for _ in range(repeat):
        start = time.perf_counter_ns()
        result = fn(*args)
        elapsed = time.perf_counter_ns() - start
        if best is None or elapsed < best:
            best = elapsed
    return result, best


def _direct(samples) -> tuple[float, float]:
    mu = direct_mean(samples)
    return mu, direct_variance(samples, mu)


def _histogram(samples) -> tuple[float, float]:
    hist = build_histogram(samples)
    total = count_total(hist)
    mu = mean(hist, total)
    return mu, variance(hist, mu, total)


def _close(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=AGREEMENT_REL_TOL, abs_tol=AGREEMENT_REL_TOL)


def compare_methods(grid, repeat: int = DEFAULT_REPEAT) -> dict:
    """
    Time both methods on the same grid.

    Returns:
        {"direct": {"mean", "variance", "elapsed_ns"},
         "histogram": {"mean", "variance", "elapsed_ns"},
         "speedup": direct ns / histogram ns,
         "agree": True when both results match within 1e-9 relative}
    """
    samples = as_samples(grid)

    (d_mean, d_var), d_ns = time_call(_direct, samples, repeat=repeat)
    (h_mean, h_var), h_ns = time_call(_histogram, samples, repeat=repeat)

    speedup = d_ns / h_ns if h_ns > 0 else math.inf
    agree = _close(d_mean, h_mean) and _close(d_var, h_var)

    logger.info(
        "Compared %dx%d: direct=%.3fms histogram=%.3fms speedup=%.2fx agree=%s",
        samples.shape[1],
        samples.shape[0],
        d_ns / 1e6,
        h_ns / 1e6,
        speedup,
        agree,
        extra={
            "width": samples.shape[1],
            "height": samples.shape[0],
            "direct_ms": d_ns / 1e6,
            "histogram_ms": h_ns / 1e6,
        },
    )
    if not agree:
        logger.warning(
            "Methods disagree: direct=(%r, %r) histogram=(%r, %r)",
            d_mean,
            d_var,
            h_mean,
            h_var,
        )

    return {
        "direct": {"mean": d_mean, "variance": d_var, "elapsed_ns": d_ns},
        "histogram": {"mean": h_mean, "variance": h_var, "elapsed_ns": h_ns},
        "speedup": speedup,
        "agree": agree,
    }
