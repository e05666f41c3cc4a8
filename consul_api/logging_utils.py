"""
Structured JSON logging for Consul requests.

The transport stamps every record it emits with the request context
(method, path, datacenter, status, duration_ms). ``RequestJsonFormatter``
renders those records as single-line JSON with the request fields always
present, so log aggregators can index them without schema drift.

    >>> import logging
    >>> import consul_api
    >>> consul_api.configure_request_logging(logging.DEBUG)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .exceptions import ConsulClientError

LOGGER_ROOT = "consul_api"

# Emitted on every record, null when the record was not about a request
REQUEST_FIELDS = ("method", "path", "datacenter", "status", "duration_ms")

_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class RequestJsonFormatter(logging.Formatter):
    """Render records as JSON with a fixed request-context schema.

    Besides the base fields (timestamp, level, logger, message) and the
    REQUEST_FIELDS, a record whose exception is a ConsulClientError gets
    ``error`` (the class name) and ``error_details`` (its details dict).
    Remaining ``extra`` values are appended under their own names.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in REQUEST_FIELDS:
            entry[name] = getattr(record, name, None)

        if record.exc_info:
            exc = record.exc_info[1]
            if isinstance(exc, ConsulClientError):
                entry["error"] = type(exc).__name__
                entry["error_details"] = exc.details
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key in entry or key.startswith("_"):
                continue
            entry[key] = value

        return json.dumps(entry, default=str)


def configure_request_logging(
    level: int = logging.INFO,
    stream: Any = None,
) -> logging.Logger:
    """Send the client's logs to ``stream`` (stdout by default) as JSON.

    Replaces handlers previously installed on the ``consul_api`` logger, so
    calling it twice does not duplicate output.
    """
    logger = logging.getLogger(LOGGER_ROOT)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(RequestJsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_client_logger(name: str) -> logging.Logger:
    """Logger for a client component, e.g. ``consul_api.transport``."""
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


class RequestLoggerAdapter(logging.LoggerAdapter):
    """Stamp one request's context on every record logged through it.

    Per-call ``extra`` wins over the adapter's context, so the transport
    can add ``status`` and ``duration_ms`` once the response is in.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs
