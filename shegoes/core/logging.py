"""
Logging for the She Goes backend.

Everything logs under the ``shegoes`` logger. Records are tagged with the
request id and the caller's user id (bound per request by the middleware),
plus whatever ritual fields the caller attaches: the streak transition, the
milestone that fired and whether the write reached the store.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Optional

LOGGER_NAME = "shegoes"

request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_ctx_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

# Fields rendered by both formatters when present on a record, in this order.
CONTEXT_FIELDS = (
    "user_id",
    "event_type",
    "error_code",
    "transition",
    "streak",
    "milestone",
    "persisted",
    "status",
    "path",
    "latency_bucket",
)

EXTRA_VALUE_LIMIT = 500


def get_request_id(default: Optional[str] = None) -> Optional[str]:
    rid = request_id_ctx_var.get()
    return rid if rid is not None else default


def get_user_id() -> Optional[str]:
    return user_id_ctx_var.get()


def latency_bucket_ms(latency_ms: Optional[float]) -> str:
    if latency_ms is None:
        return "unknown"
    for bound, label in ((10, "<10ms"), (100, "10-100ms"), (500, "100-500ms"), (1000, "500-1000ms")):
        if latency_ms < bound:
            return label
    return ">=1000ms"


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z")


def _context(record: logging.LogRecord) -> Dict[str, object]:
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if getattr(record, key, None) is not None}


class RequestContextFilter(logging.Filter):
    """Fill request_id and user_id from the request context when the caller did not."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id()
        if getattr(record, "user_id", None) is None:
            record.user_id = get_user_id()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update(_context(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class PrettyFormatter(logging.Formatter):
    """``<ts> LEVEL [shegoes] [rid=..] message user_id=.. transition=..``"""

    def format(self, record: logging.LogRecord) -> str:
        rid = getattr(record, "request_id", None)
        rid_part = f" [rid={rid}]" if rid else ""
        fields = " ".join(f"{key}={value}" for key, value in _context(record).items())
        line = f"{_timestamp(record)} {record.levelname} [{LOGGER_NAME}]{rid_part} {record.getMessage()}"
        if fields:
            line = f"{line} {fields}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(env: str = "development") -> None:
    """JSON lines in production, one readable line per event elsewhere."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if env.lower() == "production" else PrettyFormatter())
    handler.addFilter(RequestContextFilter())

    logger.handlers = [handler]
    logger.propagate = True

    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.error").propagate = False


def _truncate(value, limit: int = EXTRA_VALUE_LIMIT):
    if value is None or isinstance(value, (bool, int, float)):
        return value
    try:
        text = str(value)
    except Exception:
        return "<unserializable>"
    if len(text) <= limit:
        return text
    return text[:limit] + "...<truncated>"


def log_event(
    level: str,
    msg: str,
    *,
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    event_type: Optional[str] = None,
    error_code: Optional[str] = None,
    transition: Optional[str] = None,
    streak: Optional[int] = None,
    milestone: Optional[int] = None,
    persisted: Optional[bool] = None,
    extra: Optional[Dict[str, object]] = None,
):
    """Log ``msg`` with ritual context; unset fields are left off the record."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        configure_logging(os.getenv("ENV", "development"))

    fields = {
        "request_id": request_id or get_request_id(),
        "user_id": user_id or get_user_id(),
        "event_type": event_type,
        "error_code": error_code,
        "transition": transition,
        "streak": streak,
        "milestone": milestone,
        "persisted": persisted,
    }
    payload = {key: value for key, value in fields.items() if value is not None}
    if extra:
        for key, value in extra.items():
            payload[key] = _truncate(value)

    getattr(logger, level, logger.info)(msg, extra=payload)
