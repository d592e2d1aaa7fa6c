"""
Structured logging for mmrkit.

Every mmrkit logger hangs off the ``mmrkit`` root. Modules obtain theirs
with :func:`get_logger`, binding fields that should appear on every record
(the store backend, a file path); per-call fields go in
``extra={"context": {...}}`` and are merged over the bound ones.

Usage:
    from mmrkit.observability import setup_logging, get_logger

    setup_logging(format="text", level="DEBUG")
    log = get_logger("store", backend="file")
    log.info("Opened store", extra={"context": {"size": 19}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional

from .config import LoggingConfig

ROOT_LOGGER = "mmrkit"

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


class JSONFormatter(logging.Formatter):
    """
    Render each record as one JSON object per line.

    Example line (``source`` only appears on DEBUG records)::

        {"timestamp": "2026-01-10T15:30:00.000000Z", "level": "DEBUG",
         "logger": "mmrkit.mmr", "message": "Appended leaf",
         "context": {"pos": 4, "parents": 0, "size": 4},
         "source": {"file": "mmr.py", "line": 153, "function": "append_hash"}}
    """

    def __init__(self, include_timestamps: bool = True):
        super().__init__()
        self._include_timestamps = include_timestamps

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {}
        if self._include_timestamps:
            entry["timestamp"] = self._utc_timestamp(record)
        entry["level"] = record.levelname
        entry["logger"] = record.name
        entry["message"] = record.getMessage()

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.levelno <= logging.DEBUG:
            entry["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(entry, default=str)

    @staticmethod
    def _utc_timestamp(record: logging.LogRecord) -> str:
        # record.created is the emit time, not the format time
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return stamp.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that merges bound fields into ``record.context``."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**self.extra, **extra.get("context", {})}
        kwargs["extra"] = extra
        return msg, kwargs


def _build_formatter(format: str, include_timestamps: bool) -> logging.Formatter:
    if format == "json":
        return JSONFormatter(include_timestamps=include_timestamps)
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def _build_handlers(file: Optional[str], max_bytes: int, backup_count: int) -> List[logging.Handler]:
    # stderr keeps stdout free for CLI output
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if file:
        handlers.append(RotatingFileHandler(file, maxBytes=max_bytes, backupCount=backup_count))
    return handlers


def setup_logging(
    config: Optional[LoggingConfig] = None,
    format: str = "json",
    level: str = "INFO",
    file: Optional[str] = None,
) -> logging.Logger:
    """
    Install handlers on the ``mmrkit`` root logger, replacing earlier ones.

    Args:
        config: LoggingConfig object (overrides other args)
        format: "json" or "text"
        level: Log level name, case-insensitive
        file: Optional log file path, rotated by size

    Returns:
        The configured ``mmrkit`` logger
    """
    config = config or LoggingConfig(level=level, format=format, file=file)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, config.level.upper()))
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    formatter = _build_formatter(config.format, config.include_timestamps)
    for handler in _build_handlers(
        config.file,
        max_bytes=config.max_size_mb * 1024 * 1024,
        backup_count=config.backup_count,
    ):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(
        "Logging initialized",
        extra={"context": {"format": config.format, "level": config.level}},
    )
    return logger


def get_logger(name: str, **context) -> ContextAdapter:
    """Return ``mmrkit.<name>`` with ``context`` bound to every record."""
    return ContextAdapter(logging.getLogger(f"{ROOT_LOGGER}.{name}"), context)
