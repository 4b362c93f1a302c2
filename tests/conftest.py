from __future__ import annotations

import sys
from pathlib import Path

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.main import create_app  # noqa: E402
from app.repos.token_repo import InMemoryTokenRepo  # noqa: E402
from app.services.authorization_session import AuthorizationSession  # noqa: E402
from app.services.session_store import InMemorySessionStore  # noqa: E402
from tests.exact_helpers import FakeExact  # noqa: E402


class FakeClock:
    """Controllable replacement for time.time()."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def exact() -> FakeExact:
    return FakeExact()


@pytest.fixture
def session_store(clock: FakeClock) -> InMemorySessionStore:
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def authorization_session(session_store: InMemorySessionStore) -> AuthorizationSession:
    return AuthorizationSession(session_store, ttl_seconds=600)


@pytest.fixture
def token_repo() -> InMemoryTokenRepo:
    return InMemoryTokenRepo()


@pytest.fixture
def application(
    exact: FakeExact,
    authorization_session: AuthorizationSession,
    token_repo: InMemoryTokenRepo,
) -> FastAPI:
    return create_app(
        auth_server=exact.auth_server(),
        authorization_session=authorization_session,
        token_repo=token_repo,
    )


@pytest.fixture
def client(application: FastAPI) -> TestClient:
    # Redirects are asserted on, never followed.
    return TestClient(application, follow_redirects=False)
