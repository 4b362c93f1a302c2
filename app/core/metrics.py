"""Application metrics using the Prometheus client library.

Every metric the service exposes is defined here, in one inventory.
Other modules import the specific metric and increment or observe it at
the point of action.  Prometheus scrapes the values from GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Authorization flow
# ---------------------------------------------------------------------------

AUTH_SESSIONS = Counter(
    "auth_sessions_total",
    "Authorization session lifecycle events",
    ["event"],  # "saved", "resolved", "expired"
)

AUTH_TOKEN_EXCHANGES = Counter(
    "auth_token_exchanges_total",
    "Authorization-code exchanges against Exact by outcome",
    ["result"],  # "success", "remote_error", "unknown_error"
)

AUTH_TOKEN_EXCHANGE_DURATION = Histogram(
    "auth_token_exchange_duration_seconds",
    "Round-trip time of the Exact token endpoint call",
    # The remote call is bounded by EXACT_HTTP_TIMEOUT_SECONDS (10s default).
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
