"""Logging setup for the ``better_diff`` logger namespace.

Records go to one append-only file, tried in the temp directory and then at
the repository root, with stderr as the last resort. Lines are
``time=... level=... msg="..." key=value``; extra fields come from
``extra={"fields": {...}}`` and are written sorted by key after ``error``.
"""

from __future__ import annotations

import logging
import sys
import tempfile
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

ROOT_LOGGER_NAME = "better_diff"
LOG_FILE_NAME = "better_diff.log"
LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}
_LEVEL_NAMES = {logging.WARNING: "WARN", logging.CRITICAL: "ERROR"}


def _format_value(value: object) -> str:
    text = str(value)
    if text == "" or any(ch in text for ch in ' ="\n\t'):
        return '"' + text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'
    return text


def _exception_text(record: logging.LogRecord) -> str | None:
    if not record.exc_info:
        return None
    exc = record.exc_info[1]
    if exc is None:
        return None
    return str(exc) or type(exc).__name__


class KeyValueFormatter(logging.Formatter):
    """One ``key=value`` line per record; tracebacks are reduced to the message."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(record.created))
        stamp += f".{int(record.msecs):03d}"
        level = _LEVEL_NAMES.get(record.levelno, record.levelname)
        parts = [f"time={stamp}", f"level={level}", f"msg={_format_value(record.getMessage())}"]

        error = _exception_text(record)
        if error is not None:
            parts.append(f"error={_format_value(error)}")
        fields = getattr(record, "fields", None) or {}
        for key in sorted(fields):
            parts.append(f"{key}={_format_value(fields[key])}")
        return " ".join(parts)


@dataclass
class ErrorStats:
    total_errors: int = 0
    total_warnings: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    last_error: str = ""
    last_error_time: float = 0.0


class LogStats(logging.Filter):
    """Counts errors and warnings as they pass; in quiet mode drops non-errors."""

    def __init__(self, quiet: bool = False) -> None:
        super().__init__()
        self.quiet = quiet
        self._lock = threading.Lock()
        self._stats = ErrorStats()

    def filter(self, record: logging.LogRecord) -> bool:
        if self.quiet and record.levelno < logging.ERROR:
            return False
        with self._lock:
            if record.levelno >= logging.ERROR:
                self._stats.total_errors += 1
                message = record.getMessage()
                if record.exc_info and record.exc_info[0] is not None:
                    name = record.exc_info[0].__name__
                    self._stats.by_type[name] = self._stats.by_type.get(name, 0) + 1
                    message = f"{message}: {_exception_text(record)}"
                self._stats.last_error = message
                self._stats.last_error_time = record.created
            elif record.levelno >= logging.WARNING:
                self._stats.total_warnings += 1
        return True

    def snapshot(self) -> ErrorStats:
        with self._lock:
            return ErrorStats(
                total_errors=self._stats.total_errors,
                total_warnings=self._stats.total_warnings,
                by_type=dict(self._stats.by_type),
                last_error=self._stats.last_error,
                last_error_time=self._stats.last_error_time,
            )

    def has_errors(self) -> bool:
        with self._lock:
            return self._stats.total_errors > 0

    def reset(self) -> None:
        with self._lock:
            self._stats = ErrorStats()


def parse_level(name: str | None) -> int:
    return LEVELS.get((name or "").upper(), logging.INFO)


def close_logging() -> None:
    """Detach and close every handler on the package logger."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def configure_logging(
    level: str | None = "INFO",
    repo_root: str | Path | None = None,
    *,
    quiet: bool = False,
    stream: TextIO | None = None,
    log_dir: str | Path | None = None,
) -> tuple[logging.Logger, str | None]:
    """Install the single handler for the package logger.

    Returns the logger and, when no log file could be opened, a message
    describing the paths tried (records then go to ``stream`` or stderr).
    """
    close_logging()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(parse_level(level))
    logger.propagate = False

    candidates = [Path(log_dir or tempfile.gettempdir()) / LOG_FILE_NAME]
    if repo_root:
        candidates.append(Path(repo_root) / LOG_FILE_NAME)

    handler: logging.Handler | None = None
    failures: list[str] = []
    for path in candidates:
        try:
            handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError as exc:
            failures.append(f"{path}: {exc.strerror or exc}")
            continue
        break

    error: str | None = None
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        error = "failed to open log file (tried " + ", ".join(failures) + ")"

    handler.setFormatter(KeyValueFormatter())
    handler.addFilter(LogStats(quiet=quiet))
    logger.addHandler(handler)
    return logger, error


def log_stats(logger: logging.Logger | None = None) -> LogStats | None:
    target = logger or logging.getLogger(ROOT_LOGGER_NAME)
    for handler in target.handlers:
        for flt in handler.filters:
            if isinstance(flt, LogStats):
                return flt
    return None
