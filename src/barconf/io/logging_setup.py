"""Centralized logging bootstrap for barconf.

barconf runs as a short-lived command, so every invocation appends to one
stable ``barconf.log`` that the RotatingFileHandler caps, and stderr only
carries warnings and errors unless BARCONF_LOG_STDERR_LEVEL lowers it.

// [LAW:single-enforcer] Logger handler wiring is enforced in this module only.
// [LAW:one-source-of-truth] Runtime log path/levels are derived here and returned to callers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "barconf.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3
STDERR_DEFAULT_LEVEL = "WARNING"


@dataclass(frozen=True)
class LoggingRuntime:
    """Resolved runtime logging configuration."""

    level_name: str
    level: int
    stderr_level: int
    file_path: str


_RUNTIME: LoggingRuntime | None = None


def _parse_level(raw: str | None, fallback: str = "INFO") -> tuple[str, int]:
    normalized = str(raw or fallback).strip().upper()
    level = logging.getLevelName(normalized)
    if not isinstance(level, int):
        normalized, level = fallback, logging.getLevelName(fallback)
    return normalized, level


def _resolve_log_path() -> Path:
    explicit = os.environ.get("BARCONF_LOG_FILE")
    if explicit:
        return Path(explicit)
    log_dir = os.environ.get("BARCONF_LOG_DIR") or os.path.expanduser("~/.local/share/barconf/logs")
    return Path(log_dir) / LOG_FILE_NAME


def configure(default_level: str = "INFO") -> LoggingRuntime:
    """Attach the stderr and rotating file handlers to the ``barconf`` logger.

    BARCONF_LOG_LEVEL wins over ``default_level`` (the CLI passes the stored
    ``log_level`` setting) and governs the file. Stderr never shows records
    below BARCONF_LOG_STDERR_LEVEL (default WARNING). Idempotent: repeated
    calls return the originally configured runtime.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level_name, level = _parse_level(os.environ.get("BARCONF_LOG_LEVEL", default_level))
    _, stderr_floor = _parse_level(os.environ.get("BARCONF_LOG_STDERR_LEVEL"), STDERR_DEFAULT_LEVEL)
    stderr_level = max(level, stderr_floor)
    file_path = _resolve_log_path()
    file_path.parent.mkdir(parents=True, exist_ok=True)

    stream = logging.StreamHandler()
    stream.setLevel(stderr_level)
    stream.setFormatter(logging.Formatter("barconf: %(levelname)s %(message)s"))

    log_file = RotatingFileHandler(
        file_path,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    log_file.setLevel(level)
    log_file.setFormatter(
        logging.Formatter(
            "%(asctime)s %(process)d %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    # [LAW:single-enforcer] All barconf module loggers propagate to this one logger.
    logger = logging.getLogger("barconf")
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    logger.addHandler(stream)
    logger.addHandler(log_file)

    _RUNTIME = LoggingRuntime(
        level_name=level_name,
        level=level,
        stderr_level=stderr_level,
        file_path=str(file_path),
    )
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    """Return configured logging runtime, if configure() has run."""
    return _RUNTIME


def reset() -> None:
    """Detach handlers and forget the runtime so configure() can run again."""
    global _RUNTIME
    logger = logging.getLogger("barconf")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    _RUNTIME = None
