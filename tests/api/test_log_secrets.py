"""Codes, tokens and the client secret must never reach log output.

Each test drives a full init-auth → authenticate round trip with logging
at DEBUG and searches every captured message and extra field.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient

from tests.exact_helpers import ACCESS_TOKEN, CLIENT_SECRET, REFRESH_TOKEN, FakeExact

SHOP_ID = "7f0e5a2c-3b1d-4c8e-9f6a-2d4b1e0c7a93"
CODE = "authorization-code-do-not-log"


def _all_log_text(caplog: pytest.LogCaptureFixture) -> str:
    parts = []
    for record in caplog.records:
        parts.append(record.getMessage())
        parts.extend(str(value) for value in vars(record).values())
    return " ".join(parts)


def _round_trip(client: TestClient) -> str:
    resp = client.post(
        "/public/init-auth",
        json={"data": {"shop_id": SHOP_ID, "redirect_uri": "https://shop.example.com/done"}},
    )
    link = resp.json()["data"]["authorization_link"]
    redirect_uri = parse_qs(urlparse(link).query)["redirect_uri"][0]
    session_token = parse_qs(urlparse(redirect_uri).query)["session_token"][0]
    client.get(
        "/public/authenticate",
        params={"session_token": session_token, "code": CODE},
    )
    return session_token


def test_successful_authentication_logs_no_secrets(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.DEBUG):
        session_token = _round_trip(client)

    text = _all_log_text(caplog)
    assert SHOP_ID in text  # the flow does log, just not secrets
    for secret in (CODE, session_token, ACCESS_TOKEN, REFRESH_TOKEN, CLIENT_SECRET):
        assert secret not in text, f"{secret!r} found in log output!"


def test_remote_failure_logs_no_secrets(
    client: TestClient, exact: FakeExact, caplog: pytest.LogCaptureFixture
) -> None:
    exact.respond_with(400, json={"error": "invalid_grant", "error_description": "Bad code"})
    with caplog.at_level(logging.DEBUG):
        session_token = _round_trip(client)

    text = _all_log_text(caplog)
    assert "invalid_grant" in text
    for secret in (CODE, session_token, CLIENT_SECRET):
        assert secret not in text, f"{secret!r} found in log output!"


def test_transport_failure_logs_no_secrets(
    client: TestClient, exact: FakeExact, caplog: pytest.LogCaptureFixture
) -> None:
    exact.fail_with(httpx.ConnectError)
    with caplog.at_level(logging.DEBUG):
        session_token = _round_trip(client)

    text = _all_log_text(caplog)
    for secret in (CODE, session_token, CLIENT_SECRET):
        assert secret not in text, f"{secret!r} found in log output!"
