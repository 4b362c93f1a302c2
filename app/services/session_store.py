"""Short-lived keyed storage for pending authorizations.

An authorization is pending for the minutes between POST /public/init-auth
and Exact's redirect back to GET /public/authenticate.  The store maps the
opaque session token to the serialised PendingAuthorization.

Two properties matter:

  TTL: an abandoned authorization must disappear on its own.  Redis
  handles this with SETEX; the in-memory store mimics it by checking the
  deadline on every read.

  Atomic take: ``pop`` reads and deletes in one step (Redis GETDEL), so
  two requests replaying the same callback URL cannot both resolve the
  session.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class SessionStore(Protocol):
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value that expires after ``ttl_seconds``."""
        ...

    async def get(self, key: str) -> str | None:
        """Fetch a value.  Returns None when missing or expired."""
        ...

    async def delete(self, key: str) -> None: ...

    async def pop(self, key: str) -> str | None:
        """Atomically fetch and delete a value."""
        ...


class InMemorySessionStore:
    """Per-process store for tests and local dev (no Redis needed).

    Limitation: with several API instances, a session saved on one is
    invisible to the others.  Production runs the Redis store.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        # key -> (value, expiry timestamp in Unix seconds)
        self._entries: dict[str, tuple[str, float]] = {}

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        # Abandoned sessions are never read again; drop them on write.
        expired = [
            k for k, (_, expires_at) in self._entries.items() if expires_at <= now
        ]
        for k in expired:
            del self._entries[k]
        self._entries[key] = (value, now + ttl_seconds)

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        # Mimic Redis TTL behavior: auto-clean expired entries
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def pop(self, key: str) -> str | None:
        value = await self.get(key)
        self._entries.pop(key, None)
        return value


class RedisSessionStore:
    """Redis-backed store, shared across all API instances."""

    # Key prefix keeps sessions apart from anything else in the same Redis.
    _PREFIX = "auth_session:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        # SETEX sets value and TTL in one command; no window where the key
        # exists without an expiry.
        await self._redis.setex(f"{self._PREFIX}{key}", ttl_seconds, value)

    async def get(self, key: str) -> str | None:
        return await self._redis.get(f"{self._PREFIX}{key}")

    async def delete(self, key: str) -> None:
        await self._redis.delete(f"{self._PREFIX}{key}")

    async def pop(self, key: str) -> str | None:
        # GETDEL (Redis >= 6.2) is atomic: exactly one caller sees the value.
        return await self._redis.getdel(f"{self._PREFIX}{key}")


def build_session_store(redis_client=None) -> SessionStore:
    """Redis when a client is configured, in-memory otherwise."""
    if redis_client is not None:
        return RedisSessionStore(redis_client)
    return InMemorySessionStore()
