"""
Logging for the dashboard service.

Records are written to stdout, one JSON object per line by default:

    {"timestamp": "2024-01-06T15:00:00.123Z", "level": "INFO",
     "logger": "clinic_outcomes.services.data_provider", "message": "Loaded clinic data",
     "request_id": "3f2a9c01", "extra": {"period": 30, "patient_count": 120}}

``request_id`` is present while LoggingMiddleware is handling a request.
Anything passed through ``extra=`` lands under "extra".

LOG_LEVEL and LOG_FORMAT ("json" or "text") in the environment take
precedence over the arguments of setup_logging().
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Loggers whose own handlers are replaced so their records reach the root handler
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Attributes every LogRecord carries; anything else came from extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def clear_request_id() -> None:
    request_id_var.set(None)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, UTC millisecond timestamps."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_format: bool = True) -> None:
    """Route every record, uvicorn's included, through a single stdout handler."""
    level = os.environ.get("LOG_LEVEL", level).upper()
    if "LOG_FORMAT" in os.environ:
        json_format = os.environ["LOG_FORMAT"].lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = []
        server_logger.propagate = True

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"level": level, "format": "json" if json_format else "text"}
    )
