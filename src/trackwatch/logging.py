"""Logging configuration for trackwatch.

Uses Python's standard logging module with support for:
- A process log file via config or the TRACKWATCH_LOG environment variable
- Verbosity levels: error(0), warning(1), info(2), verbose(3), trace(4)
- One append-only log file per target, as configured by its ``log`` key
- Stderr output when attached to a real console
"""

from __future__ import annotations

import logging
import os
import re
import sys
from typing import TYPE_CHECKING

from trackwatch.errors import ConfigError

if TYPE_CHECKING:
    from trackwatch.config.schema import LoggingConfig, Target

# Custom log levels
TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

# Module-level logger
logger = logging.getLogger("trackwatch")

_initialized = False

# Target loggers keyed by log file path; one handler per file
_target_loggers: dict[str, logging.Logger] = {}

_LEVEL_MAP = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Map --verbose=N to log levels (0=errors only, 4=everything)
_VERBOSITY_MAP = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: VERBOSE,
    4: TRACE,
}

_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _LowercaseLevelFormatter(logging.Formatter):
    """Formatter that emits lowercase level names."""

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Pick the log level from config: verbose (int) wins over level (str)."""
    if config:
        if config.verbose is not None:
            return _VERBOSITY_MAP.get(config.verbose, TRACE)
        if config.level:
            return _LEVEL_MAP.get(config.level.upper(), logging.INFO)
    return logging.INFO


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Initialize process logging based on configuration.

    Call this once at startup. Subsequent calls are no-ops.

    Args:
        config: Optional LoggingConfig with level, verbose, and file settings.
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    log_level = resolve_level(config)
    logger.setLevel(log_level)

    formatter = _LowercaseLevelFormatter(_FORMAT, datefmt=_DATEFMT)

    log_path = config.file if config and config.file else os.environ.get("TRACKWATCH_LOG")

    if log_path:
        log_path = os.path.expanduser(log_path)
        try:
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            print(f"[trackwatch] Failed to open log file: {e}", file=sys.stderr)
            _add_stderr_handler(formatter, log_level)
    elif sys.stderr.isatty():
        _add_stderr_handler(formatter, log_level)


def _add_stderr_handler(formatter: logging.Formatter, level: int = logging.DEBUG) -> None:
    """Add a stderr handler to the logger."""
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Optional name for a child logger (e.g., "store", "watching").
              If None, returns the root trackwatch logger.

    Returns:
        A configured logger instance.
    """
    if name:
        return logger.getChild(name)
    return logger


def get_target_logger(target: Target) -> logging.Logger:
    """Get the logger that appends to a target's own log file.

    The file is opened in append mode and created if missing. Records also
    propagate to the process logger.

    Args:
        target: Target whose ``log`` path receives the records.

    Returns:
        A logger dedicated to this target's log file.
    """
    log_path = os.path.abspath(os.path.expanduser(target.log))
    existing = _target_loggers.get(log_path)
    if existing is not None:
        return existing

    slug = re.sub(r"[^A-Za-z0-9_-]+", "_", log_path).strip("_") or "root"
    target_logger = logger.getChild("target").getChild(slug)
    target_logger.setLevel(logging.DEBUG)

    try:
        handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot open log file {log_path}: {e}", path=target.path) from e
    handler.setLevel(logging.INFO)
    handler.setFormatter(_LowercaseLevelFormatter(_FORMAT, datefmt=_DATEFMT))
    target_logger.addHandler(handler)

    _target_loggers[log_path] = target_logger
    return target_logger


def close_target_loggers() -> None:
    """Close and detach every target log file handler."""
    for target_logger in _target_loggers.values():
        for handler in list(target_logger.handlers):
            target_logger.removeHandler(handler)
            handler.close()
    _target_loggers.clear()
