"""histstats CLI: mean and variance of 8-bit grayscale images."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

import sentry_sdk

from _version import __version__
from benchmark import DEFAULT_REPEAT, compare_methods
from diagnostics import init_diagnostics
from image_io import load_gray
from security import strip_pii
from stats import describe

logger = logging.getLogger(__name__)

_CONSENT_PATH = "~/.histstats/telemetry_consent"


def init_sentry():
    """Consent-gated Sentry init. Without consent the DSN stays empty (disabled)."""
    consent_path = os.path.expanduser(_CONSENT_PATH)
    dsn = ""
    if os.path.exists(consent_path) and Path(consent_path).read_text().strip() == "yes":
        dsn = os.environ.get("SENTRY_DSN", "")

    sentry_sdk.init(
        dsn=dsn,
        release=f"histstats@{__version__}",
        environment=os.environ.get("SENTRY_ENV", "development"),
        before_send=strip_pii,
        max_breadcrumbs=50,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="histstats",
        description="Histogram-based mean and variance of 8-bit grayscale images",
    )
    parser.add_argument("images", nargs="+", help="Image files to analyse")
    parser.add_argument(
        "--compare",
        action="store_true",
        help="Also time the direct two-pass method and report the speedup",
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=DEFAULT_REPEAT,
        help=f"Timing runs per method with --compare (default {DEFAULT_REPEAT})",
    )
    parser.add_argument("--json", action="store_true", help="One JSON object per image")
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def analyse(path: str, compare: bool = False, repeat: int = DEFAULT_REPEAT) -> dict:
    """Load one image and compute its statistics. Errors propagate."""
    samples = load_gray(path)
    stats = describe(samples)
    result = {
        "path": path,
        "width": stats["width"],
        "height": stats["height"],
        "mean": stats["mean"],
        "variance": stats["variance"],
    }
    if compare:
        timing = compare_methods(samples, repeat=repeat)
        result["direct_ns"] = timing["direct"]["elapsed_ns"]
        result["histogram_ns"] = timing["histogram"]["elapsed_ns"]
        result["speedup"] = timing["speedup"]
        result["agree"] = timing["agree"]
    return result


def _print_result(result: dict, as_json: bool):
    if as_json:
        print(json.dumps(result), flush=True)
        return
    print(f"IMAGE={result['path']}")
    print(f"WIDTH={result['width']}")
    print(f"HEIGHT={result['height']}")
    print(f"MEAN={result['mean']!r}")
    print(f"VARIANCE={result['variance']!r}")
    if "speedup" in result:
        print(f"DIRECT_NS={result['direct_ns']}")
        print(f"HISTOGRAM_NS={result['histogram_ns']}")
        print(f"SPEEDUP={result['speedup']:.2f}")
    sys.stdout.flush()


def run(argv: list[str] | None = None) -> int:
    """Parse arguments and analyse each image. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    if args.repeat < 1:
        print("histstats: --repeat must be >= 1", file=sys.stderr)
        return 2

    failed = 0
    for path in args.images:
        sentry_sdk.add_breadcrumb(category="image", message="analyse", level="info")
        try:
            result = analyse(path, compare=args.compare, repeat=args.repeat)
        except (OSError, ValueError) as e:
            failed += 1
            sentry_sdk.capture_exception(e)
            logger.exception("Failed to analyse %s", path, extra={"image": path})
            print(f"histstats: {path}: {e}", file=sys.stderr)
            continue
        logger.info(
            "Analysed %s",
            path,
            extra={"image": path, "width": result["width"], "height": result["height"]},
        )
        _print_result(result, args.json)

    return 1 if failed else 0


def main():
    init_diagnostics()
    init_sentry()
    sys.exit(run())


if __name__ == "__main__":
    main()
