"""
Logging setup for relaybot.

Console output is either human-readable text or one JSON object per line (for
hosted deployments where a collector parses stdout). A size-rotated text log is
always written under DATA_DIR/logs. At startup the effective configuration is
logged with tokens and keys redacted.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import re
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOG_FILE = "relaybot.log"
_LOG_FILE_BYTES = 10 * 1024 * 1024
_LOG_FILE_BACKUPS = 5

# Library loggers that are chatty at INFO (every HTTP request, every poll)
_QUIET_LOGGERS = ("httpx", "httpcore", "telegram", "google_genai")

# Record attributes passed via ``extra=`` that JSON output carries through
_CONTEXT_FIELDS = ("session", "chat_id", "model")

_SENSITIVE = re.compile(r"token|api_?key|secret|password", re.IGNORECASE)


class JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message (+ context, exception)."""

    def format(self, record: logging.LogRecord) -> str:
        log: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log[field] = value
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(log_level: str, logs_dir: str, json_logs: bool) -> None:
    """Replace root handlers with a console handler and a rotating file handler."""
    os.makedirs(logs_dir, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        JsonFormatter() if json_logs else logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S")
    )

    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(logs_dir, _LOG_FILE),
        maxBytes=_LOG_FILE_BYTES,
        backupCount=_LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    for handler in (console, file_handler):
        handler.setLevel(level)
    logging.basicConfig(level=level, handlers=[console, file_handler], force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def redact(key: str, value: Any) -> str:
    """Render a setting for the log, masking anything that looks like a credential."""
    text = str(value)
    if not _SENSITIVE.search(key) or not text:
        return text
    if len(text) <= 8:
        return "***"
    return f"{text[:4]}…{text[-4:]}"


def log_startup_config(settings: "Settings") -> None:
    for name in sorted(type(settings).model_fields):
        logger.info("config %s=%s", name, redact(name, getattr(settings, name)))
