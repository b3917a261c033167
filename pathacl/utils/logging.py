"""Log setup shared by the engine, facade, audit trail and CLI.

Modules call :func:`get_logger` at import time and never touch handlers.
The process entry point calls :func:`configure_logging` after settings are
loaded. Grants, revocations and resets then land in ``pathacl.log`` as one
JSON object per line carrying the resource, owner, principal and path, and
the terminal shows the same records through Rich.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

_CONTEXT_FIELDS = ("resource_id", "owner", "principal", "caller", "path", "event")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, keyed by resource and principal.

    Fields from ``_CONTEXT_FIELDS`` given via ``extra`` become top-level keys,
    so ``jq 'select(.resource_id == 7)'`` finds every change to resource 7.
    """

    default_time_format = "%Y-%m-%dT%H:%M:%S"

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                self.default_time_format
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)
        for key in _CONTEXT_FIELDS:
            if key in record.__dict__:
                payload[key] = record.__dict__[key]
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_handlers(log_dir: Path, enable_rich: bool) -> Dict[str, Dict[str, Any]]:
    handlers: Dict[str, Dict[str, Any]] = {
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": str(log_dir / "pathacl.log"),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 5,
        }
    }
    if enable_rich:
        handlers["console"] = {
            "class": "rich.logging.RichHandler",
            "formatter": "rich",
            "level": "DEBUG",
            "rich_tracebacks": True,
            "show_path": False,
        }
    else:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "json",
        }
    return handlers


def configure_logging(
    *,
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    enable_rich: Optional[bool] = None,
) -> None:
    """Install the root handlers: rotating ``pathacl.log`` plus a console.

    ``level`` is a logging level name taken from ``logging.level`` in the
    settings. ``log_dir`` comes from ``logging.directory``; without it
    ``$PATHACL_LOG_DIR`` is used, then ``~/.pathacl/logs``. The console uses
    Rich unless ``enable_rich`` is false or ``$PATHACL_RICH`` is ``"0"``, in
    which case it prints the same JSON lines as the file.

    Each call replaces the handlers of the previous one.
    """

    log_dir = log_dir or Path(os.environ.get("PATHACL_LOG_DIR", Path.home() / ".pathacl" / "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    if enable_rich is None:
        enable_rich = os.environ.get("PATHACL_RICH", "1") != "0"

    handlers = _build_handlers(log_dir, enable_rich)
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pathacl.utils.logging.JsonFormatter",
            },
            "rich": {
                "format": "%(message)s",
                "datefmt": "%H:%M:%S",
            },
        },
        "handlers": handlers,
        "root": {
            "level": level,
            "handlers": list(handlers.keys()),
        },
    }

    logging.config.dictConfig(config)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for ``name``."""

    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]
