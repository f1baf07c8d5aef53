"""
Logging Module for memory-bridge

Log setup for processes that embed the memory (the CLI, host services):
- console and rotating file handlers
- credential redaction (bearer tokens, API keys)

Library modules only call ``logging.getLogger(__name__)``; configuring
handlers is left to the application.
"""

from __future__ import annotations

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from logging import Logger

# Credential patterns
CREDENTIAL_PATTERNS = [
    # Authorization: Bearer <token>
    (re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE), r"\1[REDACTED]"),
    # api_key=<value> / apikey: <value>
    (re.compile(r"(api[_-]?key\s*[=:]\s*)[^\s,;&]+", re.IGNORECASE), r"\1[REDACTED]"),
    # "apiKey": "<value>" (JSON)
    (re.compile(r'("api[_-]?key"\s*:\s*")[^"]*(")', re.IGNORECASE), r"\1[REDACTED]\2"),
]


class CredentialFilter(logging.Filter):
    """Filter that strips credentials from log messages."""

    def __init__(self, name: str = "", enabled: bool = True):
        super().__init__(name)
        self.enabled = enabled

    def filter(self, record: logging.LogRecord) -> bool:
        if self.enabled and record.msg:
            record.msg = self._redact(str(record.msg))
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {
                        key: self._redact(value) if isinstance(value, str) else value
                        for key, value in record.args.items()
                    }
                else:
                    record.args = tuple(
                        self._redact(arg) if isinstance(arg, str) else arg
                        for arg in record.args
                    )
        return True

    def _redact(self, text: str) -> str:
        for pattern, replacement in CREDENTIAL_PATTERNS:
            text = pattern.sub(replacement, text)
        return text


def setup_logging(
    *,
    level: int | str = logging.INFO,
    log_file: Path | None = None,
    log_to_console: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    redact_credentials: bool = True,
) -> Logger:
    """
    Configure the root logger.

    Args:
        level: Log level (int or name)
        log_file: Log file path (None disables file output)
        log_to_console: Enable stderr output
        max_bytes: Max size of a log file before rotation
        backup_count: Rotated files to keep
        redact_credentials: Attach ``CredentialFilter`` to every handler

    Returns:
        The configured root logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Drop handlers from a previous call
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list[logging.Handler] = []

    if log_to_console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        if redact_credentials:
            handler.addFilter(CredentialFilter(enabled=True))
        root_logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    return root_logger