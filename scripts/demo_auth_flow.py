"""Demo: walk init-auth → Exact consent → authenticate using FastAPI TestClient.

Exact is replaced by an httpx.MockTransport that accepts any code, so no
credentials or network access are needed.

Run with:
    python scripts/demo_auth_flow.py
"""

from __future__ import annotations

import asyncio
import uuid
from urllib.parse import parse_qs, urlparse

import httpx
from fastapi.testclient import TestClient

from app.main import create_app
from app.models.shop import ShopId
from app.repos.token_repo import InMemoryTokenRepo
from app.services.auth_server import AuthServer
from app.services.exact_client import ExactAuthClient

SHOP_ID = uuid.UUID("11111111-2222-4333-8444-555555555555")
SHOP_RETURN_URI = "https://shop.example.com/exact/connected"
CALLBACK_URI = "http://testserver/public/authenticate"


def _fake_exact(request: httpx.Request) -> httpx.Response:
    form = parse_qs(request.content.decode())
    if form.get("code") != ["demo-code"]:
        return httpx.Response(
            400, json={"error": "invalid_grant", "error_description": "Unknown code"}
        )
    return httpx.Response(
        200,
        json={
            "access_token": "demo-access",
            "refresh_token": "demo-refresh",
            "expires_in": "600",
            "token_type": "bearer",
        },
    )


def main() -> None:
    exact_client = ExactAuthClient(
        client=httpx.AsyncClient(transport=httpx.MockTransport(_fake_exact))
    )
    auth_server = AuthServer(exact_client, "demo-client", "demo-secret", CALLBACK_URI)
    token_repo = InMemoryTokenRepo()
    client = TestClient(
        create_app(auth_server=auth_server, token_repo=token_repo),
        follow_redirects=False,
    )

    # ── Step 1: POST /public/init-auth ──────────────────────────────
    r = client.post(
        "/public/init-auth",
        json={"data": {"shop_id": str(SHOP_ID), "redirect_uri": SHOP_RETURN_URI}},
    )
    link = r.json()["data"]["authorization_link"]
    print(f"1. POST /public/init-auth          → {r.status_code}")
    print(f"   consent link: {link}")

    # ── Step 2: user consents at Exact, Exact redirects back ────────
    redirect_uri = parse_qs(urlparse(link).query)["redirect_uri"][0]
    session_token = parse_qs(urlparse(redirect_uri).query)["session_token"][0]

    r = client.get(
        "/public/authenticate",
        params={"session_token": session_token, "code": "demo-code"},
    )
    print(f"2. GET  /public/authenticate       → {r.status_code}  → {r.headers['location']}")

    # ── Step 3: replaying the callback is rejected ──────────────────
    r = client.get(
        "/public/authenticate",
        params={"session_token": session_token, "code": "demo-code"},
    )
    print(f"3. GET  /public/authenticate again → {r.status_code}  {r.json()['errors'][0]['detail']}")

    stored = asyncio.run(token_repo.get(ShopId(SHOP_ID)))
    print(f"\nStored: {stored!r}")


if __name__ == "__main__":
    main()
