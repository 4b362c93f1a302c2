from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.authentication import router as authentication_router
from app.api.health import router as health_router
from app.api.metrics_endpoint import router as metrics_router
from app.core.config import SETTINGS, Settings
from app.core.logging import setup_logging
from app.db.engine import async_session_factory, lifespan_db
from app.db.redis import lifespan_redis, redis_pool
from app.middleware.metrics import MetricsMiddleware
from app.middleware.request_context import RequestContextMiddleware
from app.repos.token_repo import InMemoryTokenRepo, TokenRepo
from app.services.auth_server import AuthServer
from app.services.authorization_session import AuthorizationSession
from app.services.exact_client import ExactAuthClient
from app.services.session_store import build_session_store

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


def build_auth_server(settings: Settings) -> AuthServer:
    return AuthServer(
        ExactAuthClient(timeout_seconds=settings.exact_http_timeout_seconds),
        settings.exact_client_id,
        settings.exact_client_secret,
        settings.exact_redirect_uri,
        base_url=settings.exact_base_url,
    )


def create_app(
    *,
    settings: Settings = SETTINGS,
    auth_server: AuthServer | None = None,
    authorization_session: AuthorizationSession | None = None,
    token_repo: TokenRepo | None = None,
) -> FastAPI:
    """Build the application and the services its handlers depend on.

    Anything not passed in is built from ``settings``.  The token repo
    stays None when a database is configured; handlers then get a
    PostgreSQL repo bound to a request-scoped session.
    """
    if auth_server is None:
        auth_server = build_auth_server(settings)
    if authorization_session is None:
        authorization_session = AuthorizationSession(
            build_session_store(redis_pool),
            ttl_seconds=settings.auth_session_ttl_seconds,
        )
    if token_repo is None and async_session_factory is None:
        token_repo = InMemoryTokenRepo()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Nested so teardown runs in reverse order even if one fails.
        async with lifespan_db():
            async with lifespan_redis():
                yield
        await app.state.auth_server.aclose()

    app = FastAPI(
        title="exact-connect",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
    )
    app.state.auth_server = auth_server
    app.state.authorization_session = authorization_session
    app.state.token_repo = token_repo

    # Middleware execution order: last-added runs first (outermost layer).
    # RequestContext (outermost) → Metrics → route handler
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(authentication_router)

    return app


app = create_app()

logger.info(
    "exact-connect started  env=%s log_level=%s port=%d exact=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.exact_base_url,
    "on" if SETTINGS.is_dev else "off",
)
