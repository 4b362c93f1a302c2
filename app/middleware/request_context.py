"""Request context middleware: one ID per request, on every log line.

An authentication spans two requests (init-auth, then Exact's callback)
and each of them logs from several modules.  Tagging every log line with
a request ID keeps concurrent attempts apart in the log stream.

The ID lives in a ContextVar, not a thread-local: async requests share a
thread, but each task gets its own copy of the context.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request, and log one summary line.

    The ID comes from the X-Request-ID header when the caller sent one,
    otherwise a fresh UUID.  It is echoed back on the response.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = request_id_var.set(req_id)

        try:
            start = time.monotonic()
            response = await call_next(request)
            duration_ms = round((time.monotonic() - start) * 1000, 1)

            # Path only: the authenticate query string holds the code.
            logger.info(
                "%s %s → %d (%.1fms)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = req_id
        return response
