"""Failure results of the Exact authorization flow.

Services return one of these instead of raising, so the controller can
match on the variant and render the error body.  ``kind`` is the tag;
``status``/``title``/``detail`` are rendered verbatim into the response.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

AUTHENTICATION_ERROR_TITLE = "Authentication error"


@dataclass(frozen=True, slots=True)
class UnknownError:
    """Transport failure or unparseable upstream response."""

    kind: ClassVar[str] = "unknown"

    status: str = "400"
    title: str = AUTHENTICATION_ERROR_TITLE
    detail: str = "Unknown request exception"


@dataclass(frozen=True, slots=True)
class RemoteError:
    """Exact rejected the exchange with a structured reason."""

    kind: ClassVar[str] = "remote"

    status: str
    title: str
    detail: str


@dataclass(frozen=True, slots=True)
class SessionExpiredError:
    """Session token unknown, expired, or already used."""

    kind: ClassVar[str] = "session_expired"

    status: str = "400"
    title: str = AUTHENTICATION_ERROR_TITLE
    detail: str = "Authorization session expired"


AuthError = UnknownError | RemoteError | SessionExpiredError


def to_json_api(error: AuthError) -> dict[str, str]:
    """One entry of a JSON:API ``errors`` array."""
    return {"status": error.status, "title": error.title, "detail": error.detail}
