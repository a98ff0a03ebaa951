# src/logging/logger.py — v2
"""Logging setup for lexassist: JSON/text formatters and handler wiring.

All module loggers live under the "lexassist" namespace, so configuring
that one logger covers the whole package. Console output goes to stderr
because stdout carries CLI answers.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from lexassist.logging.context import get_context
from lexassist.logging.handlers import SecretRedactingFilter, create_rotating_handler

if TYPE_CHECKING:
    from lexassist.config.settings import Settings

ROOT_LOGGER_NAME = "lexassist"


def _timestamp() -> datetime:
    return datetime.now(timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with request context and structured extras.

    Structured payloads are attached with ``extra={"data": {...}}``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _timestamp().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line developer format: time, level, logger, [request] (step)."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        prefix = f"{_timestamp():%Y-%m-%d %H:%M:%S} [{record.levelname:8s}] {record.name}"
        if ctx.request_id:
            prefix += f" [{ctx.request_id}]"
        if ctx.step:
            prefix += f" ({ctx.step})"
        line = f"{prefix} - {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 5,
    secrets: Iterable[str] = (),
) -> logging.Logger:
    """(Re)configure the "lexassist" logger; repeated calls replace handlers.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        log_format: "json" or "text".
        log_file: Optional rotating log file in addition to stderr.
        rotation: Rollover size for the log file.
        retention: Rolled-over files to keep.
        secrets: Values (API keys) masked in every emitted message.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    redactor = SecretRedactingFilter(secrets)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(create_rotating_handler(log_file, rotation=rotation, retention=retention))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(redactor)
        logger.addHandler(handler)
    return logger


def setup_logging_from_settings(settings: Settings, verbose: bool = False) -> logging.Logger:
    """Apply the LOG_* settings; the Gemini key is always redacted."""
    return setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        secrets=[settings.gemini_api_key],
    )
