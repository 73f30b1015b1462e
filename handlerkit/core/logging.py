"""core/logging.py — Structured JSON logging with time-rotated file output.

Call configure_logging() once at application startup (lifespan in app.py).
After that, use standard logging.getLogger(__name__) throughout the package
and attach structured fields with extra={...}.

Output:
  - File:    JSON lines in <log_dir>/<module>.log, rotated every
             `rotate_time`, rotated files kept for `max_age`
  - Console: JSON lines to stdout (optional)
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import re
import sys
from datetime import timedelta

from pythonjsonlogger.json import JsonFormatter

_LOCK_SUFFIX = "_lock"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_DURATION_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> timedelta:
    """Parse a Go-style duration string such as "24h", "90m" or "1h30m".

    Raises:
        ValueError: empty, negative or malformed durations.
    """
    if value == "0":
        return timedelta(0)
    pos = 0
    seconds = 0.0
    for match in _DURATION_RE.finditer(value):
        if match.start() != pos:
            break
        seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if not value or pos != len(value):
        raise ValueError(f"invalid duration {value!r}")
    return timedelta(seconds=seconds)


def parse_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {log_level!r}")
    return level


def clear_lock_files(log_dir: str) -> None:
    """Remove *_lock files a crashed process left behind in log_dir."""
    if not os.path.isdir(log_dir):
        return
    for name in os.listdir(log_dir):
        if name.endswith(_LOCK_SUFFIX):
            os.remove(os.path.join(log_dir, name))


def configure_logging(
    module: str = "app",
    log_level: str = "DEBUG",
    log_dir: str = "logs",
    rotate_time: str = "24h",
    max_age: str = "72h",
    console: bool = True,
) -> None:
    """Configure the root logger with a JSON rotating file handler (+ console).

    Args:
        module: Log file stem, written to <log_dir>/<module>.log.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        rotate_time: How often the file rolls over.
        max_age: How long rotated files are kept.
        console: Also write JSON lines to stdout.
    """
    rotate = parse_duration(rotate_time)
    keep = parse_duration(max_age)
    level = parse_level(log_level)
    if rotate.total_seconds() <= 0:
        raise ValueError(f"rotate_time must be positive, got {rotate_time!r}")

    clear_lock_files(log_dir)
    os.makedirs(log_dir, exist_ok=True)

    formatter = JsonFormatter(_FORMAT)
    log_file = os.path.join(log_dir, f"{module}.log")

    # ── Time-rotated file handler ──────────────────────────────────────────────
    file_handler = logging.handlers.TimedRotatingFileHandler(
        log_file,
        when="S",
        interval=max(1, int(rotate.total_seconds())),
        backupCount=max(1, int(keep / rotate)),
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    # ── Root logger ────────────────────────────────────────────────────────────
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        root.addHandler(console_handler)

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={"log_level": log_level, "log_file": os.path.abspath(log_file)},
    )
