"""Structured logging.

Log lines carry keyword fields passed to ``StructuredLogger`` calls and,
while a narrative is being generated, the generation ID bound by
``generation_context`` so one model round trip can be followed end to end.
"""

import json
import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from functools import partialmethod
from typing import Any

generation_id_ctx: ContextVar[str | None] = ContextVar("generation_id", default=None)

# Third-party loggers held at WARNING
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "openai", "apscheduler")


@contextmanager
def generation_context(question_id: str) -> Iterator[str]:
    """Bind a fresh generation ID while one narrative is produced.

    Args:
        question_id: Question being answered; prefixes the ID

    Yields:
        The bound generation ID
    """
    token = generation_id_ctx.set(f"{question_id}-{uuid.uuid4().hex[:8]}")
    try:
        yield generation_id_ctx.get()
    finally:
        generation_id_ctx.reset(token)


class _ServiceFormatter(logging.Formatter):
    """Common state for the service's formatters."""

    def __init__(self, service_name: str = "nutrition-insights"):
        super().__init__()
        self.service_name = service_name

    @staticmethod
    def fields(record: logging.LogRecord) -> dict[str, Any]:
        return getattr(record, "extra_fields", None) or {}


class JsonFormatter(_ServiceFormatter):
    """One JSON object per line.

    Keys: timestamp, level, service, logger, message, then generation_id
    when bound, the call's keyword fields, the traceback if any, and the
    source location for ERROR and above.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if generation_id := generation_id_ctx.get():
            entry["generation_id"] = generation_id
        entry.update(self.fields(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.levelno >= logging.ERROR:
            entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }
        return json.dumps(entry, default=str)


class TextFormatter(_ServiceFormatter):
    """``time - service - LEVEL - [generation] - message key=value ...``"""

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S"),
            self.service_name,
            record.levelname,
            f"[{generation_id_ctx.get() or '-'}]",
            record.getMessage(),
        ]
        line = " - ".join(parts)

        pairs = " ".join(f"{key}={value}" for key, value in self.fields(record).items())
        if pairs:
            line = f"{line} {pairs}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    log_format: str = "json",
    log_level: str = "INFO",
    service_name: str = "nutrition-insights",
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        log_format: 'json' or 'text'
        log_level: Root level name; unknown names fall back to INFO
        service_name: Value of the service field
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter_class = JsonFormatter if log_format.lower() == "json" else TextFormatter
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter_class(service_name=service_name))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class StructuredLogger:
    """``logging.Logger`` wrapper taking structured fields as keywords.

    ``logger.info("Model loaded", model=name)`` attaches ``model`` to the
    record as an extra field.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, msg: str, *, exc_info: bool = False, **fields: Any) -> None:
        extra = {"extra_fields": fields} if fields else None
        self._logger.log(level, msg, exc_info=exc_info, extra=extra)

    debug = partialmethod(_log, logging.DEBUG)
    info = partialmethod(_log, logging.INFO)
    warning = partialmethod(_log, logging.WARNING)
    error = partialmethod(_log, logging.ERROR)
    exception = partialmethod(_log, logging.ERROR, exc_info=True)


def get_logger(name: str) -> StructuredLogger:
    """Structured logger for a module; pass ``__name__``."""
    return StructuredLogger(name)
