"""Request-scoped access to the services built in ``create_app``.

Services are constructed once at startup and stored on ``app.state``;
handlers receive them through these dependencies instead of importing
module-level singletons.  Tests swap them by passing their own instances
to ``create_app``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Request

from app.db.engine import get_async_session
from app.repos.pg_token_repo import PgTokenRepo
from app.repos.token_repo import TokenRepo
from app.services.auth_server import AuthServer
from app.services.authorization_session import AuthorizationSession


def get_auth_server(request: Request) -> AuthServer:
    return request.app.state.auth_server


def get_authorization_session(request: Request) -> AuthorizationSession:
    return request.app.state.authorization_session


async def get_token_repo(request: Request) -> AsyncGenerator[TokenRepo, None]:
    """The configured repo, or a PostgreSQL repo bound to a request session.

    ``app.state.token_repo`` is None only when DATABASE_URL is set; the
    session then commits when the request succeeds and rolls back otherwise.
    """
    repo = request.app.state.token_repo
    if repo is not None:
        yield repo
        return

    async for session in get_async_session():
        yield PgTokenRepo(session)
