"""
Logging setup for the curriculum engine.

Two output modes share one handler on the root logger:
- production writes one JSON object per line, including every ``extra=`` field
- anything else writes a short text line for a terminal

Each line carries the id of the HTTP request that produced it. The request
middleware stores the id in ``request_id_var`` and ``RequestIdFilter`` copies
it onto the record.

Usage:
    from learnpath.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Plan assembled", extra={"study_plan_id": plan.id})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

NO_REQUEST = "-"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes every LogRecord has; anything else on a record came from extra=
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName", "request_id"}

_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")

_TEXT_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s %(message)s"


def get_request_id() -> Optional[str]:
    return request_id_var.get()


class RequestIdFilter(logging.Filter):
    """Stamp ``record.request_id``; ``-`` outside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or NO_REQUEST  # type: ignore[attr-defined]
        return True


def _jsonable(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        value = sorted(value)
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per record: fixed keys first, then the extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", NO_REQUEST)
        if request_id and request_id != NO_REQUEST:
            payload["request_id"] = request_id
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload.update(
            (key, _jsonable(value))
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and value is not None
        )
        return json.dumps(payload)


def _formatter_for(environment: str) -> logging.Formatter:
    if environment == "production":
        return JsonFormatter()
    return logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S")


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Install the single stderr handler on the root logger.

    Calling it again replaces the handler rather than adding a second one.
    ``debug`` forces DEBUG whatever ``log_level`` says; an unknown level name
    falls back to INFO.
    """
    level = logging.DEBUG if debug else logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(_formatter_for(environment))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
