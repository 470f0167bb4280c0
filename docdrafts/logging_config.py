from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime

from flask import g, has_request_context, request

from .config import Settings

REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{8,128}$")

# Attributes stamped on every record; absent outside a request.
CONTEXT_FIELDS = ("request_id", "remote_addr", "method", "path")

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s]: %(message)s"


def _request_context() -> dict[str, str | None]:
    if not has_request_context():
        return dict.fromkeys(CONTEXT_FIELDS)
    return {
        "request_id": getattr(g, "request_id", None),
        "remote_addr": request.headers.get("X-Real-IP") or request.remote_addr,
        "method": request.method,
        "path": request.path,
    }


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _request_context().items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; empty request fields are left out."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key in CONTEXT_FIELDS
            if (value := getattr(record, key, None))
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=True)


def _formatter(log_format: str) -> logging.Formatter:
    if log_format == "plain":
        return logging.Formatter(PLAIN_FORMAT)
    return JsonFormatter()


def configure_logging(app, settings: Settings) -> None:
    """Route the root logger and ``app.logger`` through one formatter.

    Safe to call once per app; handlers never collect duplicate filters.
    """
    level = logging.getLevelNamesMapping().get(settings.log_level, logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(logging.StreamHandler())

    formatter = _formatter(settings.log_format)
    for handler in root.handlers:
        handler.setFormatter(formatter)
        if not any(isinstance(f, RequestContextFilter) for f in handler.filters):
            handler.addFilter(RequestContextFilter())

    root.setLevel(level)
    app.logger.handlers = list(root.handlers)
    app.logger.setLevel(level)
    app.logger.propagate = False
