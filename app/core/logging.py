"""Logging configuration for exact-connect.

Two output formats share one setup function:

  _ContainerFormatter: human-readable, single-line, for local dev.
    Read in a terminal; WARNING and above carry the source location.

  _JsonFormatter: one JSON object per line, for production.
    Log aggregators parse it natively, so request_id, shop_id and the
    other context fields become filterable keys.  Enable with LOG_JSON=true.

Secrets (authorization codes, access/refresh tokens, session tokens and
the Exact client secret) are never passed to a logger.  Shop ids and
error kinds are safe to log and are what on-call needs to trace a failed
authentication.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar

# Set per request by RequestContextMiddleware; "-" outside a request.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestContextFilter(logging.Filter):
    """Attach the current request ID to every record the handler emits."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


class _IsoFormatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        # Milliseconds go before the +HHMM offset.
        base = super().formatTime(record, _DATEFMT)
        return f"{base[:-5]}.{int(record.msecs):03d}{base[-5:]}"


class _ContainerFormatter(_IsoFormatter):
    """One human-readable line per record, for a terminal.

    Carries the request ID so the two halves of an authentication can be
    matched up by eye.  WARNING and above get a ``[file:line]`` suffix.
    """

    _FMT = "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s  %(message)s"
    _LOCATION = "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(self._FMT, defaults={"request_id": "-"})
        self._with_location = _IsoFormatter(
            self._FMT + self._LOCATION, defaults={"request_id": "-"}
        )

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return self._with_location.format(record)
        return super().format(record)


class _JsonFormatter(_IsoFormatter):
    """JSON Lines output for log aggregators.

    Context keys come from RequestContextMiddleware (request_id, method,
    path, status_code, duration_ms) or from ``extra=`` in the
    authentication flow (shop_id, error_kind).  Missing keys are omitted.
    """

    _CONTEXT_FIELDS = (
        "request_id",
        "method",
        "path",
        "status_code",
        "duration_ms",
        "shop_id",
        "error_kind",
    )

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in self._CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.levelno >= logging.WARNING:
            entry["location"] = f"{record.filename}:{record.lineno}"
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Send all logging to stdout with one handler on the root logger.

    ``level_name`` is one of debug/info/warning/error (unknown names fall
    back to INFO).  ``json_format`` selects _JsonFormatter over the
    container format; main.py passes LOG_JSON.  Safe to call repeatedly:
    the previous root handlers are replaced.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    # Handler filters also see records propagated from child loggers.
    handler.addFilter(_RequestContextFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # httpx logs request URLs at INFO and the callback URL carries the code.
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
