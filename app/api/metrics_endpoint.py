"""Prometheus scrape endpoint (text exposition format, not JSON).

Exposes the HTTP metrics plus the authorization-flow counters
(auth_sessions_total, auth_token_exchanges_total).  Restrict access at
the ingress in production; exchange failure rates are not public data.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
