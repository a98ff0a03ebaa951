# src/logging/handlers.py — v2
"""Log handlers and filters: size-based file rotation, secret redaction."""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable

_SIZE_PATTERN = re.compile(r"^(\d+)\s*(B|KB|MB|GB)?$", re.IGNORECASE)
_UNIT_BYTES = {"B": 1, "KB": 1024, "MB": 1024**2, "GB": 1024**3}

# Hosted-API keys sometimes surface inside request URLs (?key=...)
_URL_KEY_PATTERN = re.compile(r"([?&]key=)[^&\s\"']+")

REDACTED = "***"


def parse_size(size_str: str) -> int:
    """Turn '10MB', '512 kb' or a bare byte count into bytes."""
    match = _SIZE_PATTERN.match(size_str.strip())
    if not match or int(match.group(1)) == 0:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    unit = (match.group(2) or "B").upper()
    return int(match.group(1)) * _UNIT_BYTES[unit]


class SecretRedactingFilter(logging.Filter):
    """Mask API keys in rendered log messages.

    Registered secrets are replaced wherever they appear; query-string
    keys are masked even when not registered.
    """

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self._secrets = sorted({s for s in secrets if s and len(s) >= 4}, key=len, reverse=True)

    def redact(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        return _URL_KEY_PATTERN.sub(rf"\g<1>{REDACTED}", text)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def create_rotating_handler(
    log_file: str | Path,
    rotation: str = "10MB",
    retention: int = 5,
) -> RotatingFileHandler:
    """Open a size-rotating UTF-8 log file, creating parent directories.

    Args:
        log_file: Target path (``~`` is expanded).
        rotation: Size that triggers a rollover, e.g. "10MB".
        retention: Rolled-over files to keep beside the live one.
    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
    )
