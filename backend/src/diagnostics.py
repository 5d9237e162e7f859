"""Diagnostics: structured JSON logging and an unhandled-exception hook.

Log records may carry image context through ``extra=``; any of
CONTEXT_FIELDS present on a record is copied into its JSON line.
"""

import datetime
import json
import logging
import logging.handlers
import os
import sys
import time
from pathlib import Path

logger = logging.getLogger(__name__)

APP_DIR = Path("~/.histstats").expanduser()
LOG_FILENAME = "histstats.log"

# Maximum log age in days
MAX_LOG_AGE_DAYS = 7

# Per-image context attached by main and benchmark
CONTEXT_FIELDS = ("image", "width", "height", "direct_ms", "histogram_ms")


def _validate_log_dir(env_dir: str) -> str:
    """Resolve HISTSTATS_LOG_DIR, falling back to ~/.histstats/logs outside that tree."""
    default = APP_DIR / "logs"
    if not env_dir:
        return str(default)
    candidate = Path(env_dir).resolve()
    if not candidate.is_relative_to(APP_DIR.resolve()):
        logger.warning("HISTSTATS_LOG_DIR %s is outside %s, using default", env_dir, APP_DIR)
        return str(default)
    return str(candidate)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with any image context from ``extra=``."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.datetime.fromtimestamp(record.created, tz=datetime.timezone.utc)
        entry = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = {
            field: getattr(record, field)
            for field in CONTEXT_FIELDS
            if hasattr(record, field)
        }
        if context:
            entry["context"] = context
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(entry, default=str)


def _cleanup_old_logs(log_dir: str):
    """Remove histstats.log and its rotations once untouched for MAX_LOG_AGE_DAYS."""
    max_age = MAX_LOG_AGE_DAYS * 24 * 3600
    now = time.time()
    for path in Path(log_dir).glob(f"{LOG_FILENAME}*"):
        try:
            if now - path.stat().st_mtime > max_age:
                path.unlink()
        except OSError as e:
            logger.debug("Could not remove old log %s: %s", path.name, e)


def setup_structured_logging(log_dir: str | None = None) -> str:
    """Attach a rotating JSON file handler to the root logger.

    Args:
        log_dir: Override log directory (validated against ~/.histstats prefix).

    Returns:
        The directory the log file is written to.
    """
    resolved_dir = _validate_log_dir(log_dir or os.environ.get("HISTSTATS_LOG_DIR", ""))
    os.makedirs(resolved_dir, mode=0o700, exist_ok=True)

    log_path = os.path.join(resolved_dir, LOG_FILENAME)
    log_level = os.environ.get("HISTSTATS_LOG_LEVEL", "INFO").upper()

    # Rotating handler: 10MB max, 7 backups
    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10_000_000,
        backupCount=7,
    )
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level, logging.INFO))
    root.addHandler(handler)

    _cleanup_old_logs(resolved_dir)

    return resolved_dir


def setup_excepthook():
    """Log unhandled exceptions through the JSON logger, then defer to the default hook."""

    def _logging_excepthook(exc_type, exc_value, exc_tb):
        if not issubclass(exc_type, KeyboardInterrupt):
            logger.critical(
                "Unhandled exception", exc_info=(exc_type, exc_value, exc_tb)
            )
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _logging_excepthook


def init_diagnostics() -> str:
    """Initialize logging and the exception hook. Call from main.py."""
    log_dir = setup_structured_logging()
    setup_excepthook()
    logger.info("Diagnostics initialized: logging=%s", log_dir)
    return log_dir
