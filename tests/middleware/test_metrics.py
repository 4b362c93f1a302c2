"""Prometheus metrics middleware.

prometheus-client keeps one global registry and counters only go up, so
every assertion reads the value before the action and checks the delta.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY


def _get_sample(name: str, labels: dict | None = None) -> float:
    """Read a metric sample's current value from the global registry."""
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before == 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    assert _get_sample("http_request_duration_seconds_count", labels) - before == 1


def test_endpoint_label_is_route_template_without_query(client: TestClient) -> None:
    """The callback query carries the code; it must not become a label."""
    labels = {"method": "GET", "endpoint": "/public/authenticate", "status_code": "400"}
    before = _get_sample("http_requests_total", labels)
    client.get(
        "/public/authenticate",
        params={"session_token": "nope", "code": "secret-code"},
    )
    assert _get_sample("http_requests_total", labels) - before == 1
    assert "secret-code" not in client.get("/metrics").text


def test_validation_errors_are_counted(client: TestClient) -> None:
    labels = {"method": "POST", "endpoint": "/public/init-auth", "status_code": "422"}
    before = _get_sample("http_requests_total", labels)
    client.post("/public/init-auth", json={"data": {}})
    assert _get_sample("http_requests_total", labels) - before == 1


def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "http_request_duration_seconds" in resp.text
    assert "auth_token_exchanges_total" in resp.text
    assert "auth_sessions_total" in resp.text


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before


def test_active_requests_gauge_returns_to_baseline(client: TestClient) -> None:
    before = _get_sample("http_active_requests")
    client.get("/health")
    assert _get_sample("http_active_requests") == before
