"""JSON log lines on stderr, tagged with the request trace id when serving."""
from __future__ import annotations

import contextvars
import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

PACKAGE_LOGGER = "hotbrew"
TRACE_HEADER = "X-Trace-ID"

trace_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("trace_id", default="")

# attributes every LogRecord carries; anything else came in via ``extra=``
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Fields passed through ``extra=`` (``source``, ``item_id`` ...) are
    copied into the object next to the standard ones.
    """

    def __init__(self, service_name: str = PACKAGE_LOGGER) -> None:
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service_name": self.service_name,
            "logger": record.name,
            "trace_id": trace_id_var.get(""),
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and key not in entry:
                entry[key] = value
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(service_name: str, level: str = "INFO") -> logging.Logger:
    """Route the ``hotbrew`` package logger to stderr as JSON.

    Calling it again replaces the previous handler, so the CLI and the
    server can each configure logging at startup.

    Args:
        service_name: Recorded as ``service_name`` in every line.
        level: Level name such as ``"warning"``; unknown names mean INFO.

    Returns:
        The package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter(service_name=service_name))
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


class TraceIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with a trace id and echo it in ``X-Trace-ID``.

    A trace id sent by the client is kept; otherwise a UUID4 is minted.
    """

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        trace_id = request.headers.get(TRACE_HEADER) or str(uuid.uuid4())
        token = trace_id_var.set(trace_id)
        try:
            response = await call_next(request)
        finally:
            trace_id_var.reset(token)
        response.headers[TRACE_HEADER] = trace_id
        return response
