"""Input validation gates and error-report scrubbing for histstats."""

import json
import os
import re
from pathlib import Path

MAX_IMAGE_BYTES = 200 * 1024 * 1024  # 200 MB
ALLOWED_EXTENSIONS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".bmp",
    ".tif",
    ".tiff",
    ".gif",
    ".webp",
    ".pgm",
}

# 8192 x 8192, below Pillow's decompression-bomb warning threshold
MAX_PIXELS = 8192 * 8192


def validate_image_path(path: str) -> list[str]:
    """Validate an image path before decoding. Returns list of errors (empty = valid).

    Checks:
    - File exists and is a regular file
    - Not a symlink
    - Extension in whitelist
    - File size <= MAX_IMAGE_BYTES
    """
    errors: list[str] = []
    p = Path(path)

    if p.is_symlink():
        errors.append("Symlinks are not allowed")
        return errors

    if not p.is_file():
        errors.append(f"File not found: {path}")
        return errors

    ext = p.suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        errors.append(
            f"Extension '{ext}' not allowed. Allowed: {sorted(ALLOWED_EXTENSIONS)}"
        )

    size = p.stat().st_size
    if size > MAX_IMAGE_BYTES:
        size_mb = size / (1024 * 1024)
        errors.append(
            f"File too large: {size_mb:.1f} MB (max {MAX_IMAGE_BYTES // (1024 * 1024)} MB)"
        )

    return errors


def validate_dimensions(width: int, height: int) -> list[str]:
    """Validate decoded image dimensions against MAX_PIXELS. Returns list of errors."""
    errors: list[str] = []
    if width < 0 or height < 0:
        errors.append(f"Negative dimensions: {width}x{height}")
    elif width * height > MAX_PIXELS:
        errors.append(
            f"Image {width}x{height} exceeds maximum of {MAX_PIXELS} pixels"
        )
    return errors


# --- PII stripping for Sentry events ---

_HOME = os.path.expanduser("~")
_USERNAME = os.path.basename(_HOME)
_PATH_PATTERN = re.compile(r"/Users/[^/\s]+|/home/[^/\s]+|C:\\Users\\[^\\\s]+")
_SENSITIVE_KEYS = {"token", "auth", "secret", "password", "dsn"}


def _scrub_dict(d: dict):
    for key in list(d.keys()):
        if any(s in key.lower() for s in _SENSITIVE_KEYS):
            d[key] = "<REDACTED>"


def strip_pii(event: dict, hint: dict) -> dict:
    """Sentry before_send hook. Replaces home paths (image locations) and secrets."""
    event_str = json.dumps(event)
    if _HOME not in ("", "/"):
        event_str = event_str.replace(_HOME, "<HOME>")
    if _USERNAME:
        event_str = event_str.replace(_USERNAME, "<USER>")
    event_str = _PATH_PATTERN.sub("<REDACTED_PATH>", event_str)
    event = json.loads(event_str)

    _scrub_dict(event.get("extra", {}))
    for ctx in event.get("contexts", {}).values():
        if isinstance(ctx, dict):
            _scrub_dict(ctx)
    return event
