"""Logging setup for edustats.

Everything goes to stdout through a single root handler.  Two output
shapes are supported:

  _ContainerFormatter: one human-readable line per record, for local
    runs and `docker logs`.  WARNING and above get a [file:line] suffix.

  _JsonFormatter: JSON Lines, for log shippers.  Request context fields
    (request_id, path, status_code from RequestContextMiddleware; user_id,
    report, event_type from the statistics service) become top-level keys
    so they can be filtered on directly.

LOG_JSON=true selects the JSON formatter.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar

# Loggers that are chatty at DEBUG/INFO and rarely useful there.
_NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpcore",
    "httpx",
    "sqlalchemy.engine",
    "asyncio",
)

# Set per request by RequestContextMiddleware
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        return True


class _ContainerFormatter(logging.Formatter):
    """ISO-8601 timestamp, level, logger name, message.

    Location is appended only for WARNING+ so the common INFO lines stay
    short.  Tracebacks are rendered when exc_info is set.
    """

    _BASE_FMT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
    _LOC_SUFFIX = "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt)
        ms = int(record.msecs)
        # Milliseconds go before the +HHMM offset
        return f"{base[:-5]}.{ms:03d}{base[-5:]}"

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            self._style._fmt = self._BASE_FMT + self._LOC_SUFFIX
        else:
            self._style._fmt = self._BASE_FMT
        return super().format(record)


class _JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    _CONTEXT_FIELDS = (
        "request_id",
        "method",
        "path",
        "user_id",
        "status_code",
        "duration_ms",
        "report",
        "event_type",
    )

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in self._CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Install the stdout handler on the root logger.

    Unknown level names fall back to INFO.  Third-party loggers in
    _NOISY_LOGGERS never go below WARNING.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    # On the handler, not the root logger: logger filters skip propagated records
    handler.addFilter(_RequestContextFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
