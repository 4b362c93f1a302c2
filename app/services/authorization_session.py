"""Pending-authorization lifecycle, keyed by an opaque session token.

save():  called by init-auth; remembers which shop asked to connect and
          where to send the user afterwards.
fetch(): called by the Exact callback; resolves the token exactly once.
          A captured callback URL cannot be replayed because the entry is
          removed on the first fetch.
"""

from __future__ import annotations

import logging
import secrets

from app.core.metrics import AUTH_SESSIONS
from app.models.auth_error import SessionExpiredError
from app.models.authorization import PendingAuthorization
from app.models.shop import ShopId
from app.services.session_store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_SEC = 600


class AuthorizationSession:
    def __init__(
        self, store: SessionStore, *, ttl_seconds: int = DEFAULT_SESSION_TTL_SEC
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    async def save(self, shop_id: ShopId, redirect_uri: str) -> str:
        """Store the pending authorization and return its session token."""
        session_token = secrets.token_urlsafe(32)
        pending = PendingAuthorization(shop_id=shop_id, redirect_uri=redirect_uri)
        await self._store.set(session_token, pending.to_json(), self._ttl_seconds)

        AUTH_SESSIONS.labels(event="saved").inc()
        logger.info(
            "Authorization session saved  shop_id=%s ttl=%ds",
            shop_id,
            self._ttl_seconds,
            extra={"shop_id": str(shop_id)},
        )
        return session_token

    async def fetch(
        self, session_token: str
    ) -> PendingAuthorization | SessionExpiredError:
        """Consume the session.  Unknown, expired or reused tokens expire."""
        raw = await self._store.pop(session_token)
        if raw is None:
            AUTH_SESSIONS.labels(event="expired").inc()
            logger.warning("Authorization session missing, expired or already used")
            return SessionExpiredError()

        try:
            pending = PendingAuthorization.from_json(raw)
        except (ValueError, KeyError, TypeError, AttributeError):
            AUTH_SESSIONS.labels(event="expired").inc()
            logger.warning("Authorization session payload unreadable; treating as expired")
            return SessionExpiredError()

        AUTH_SESSIONS.labels(event="resolved").inc()
        logger.info(
            "Authorization session resolved  shop_id=%s",
            pending.shop_id,
            extra={"shop_id": str(pending.shop_id)},
        )
        return pending
