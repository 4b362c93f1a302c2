"""HTTP transport to Exact's OAuth2 token endpoint."""

from __future__ import annotations

from typing import Protocol

import httpx

DEFAULT_TIMEOUT_SEC = 10.0


class AuthClient(Protocol):
    async def post(self, url: str, data: dict[str, str]) -> httpx.Response:
        """POST a form.  Raises httpx.HTTPStatusError or httpx.RequestError."""
        ...

    async def aclose(self) -> None: ...


class ExactAuthClient:
    """httpx-backed AuthClient with a bounded timeout.

    Non-2xx responses raise ``httpx.HTTPStatusError`` (the response stays
    attached to the error); connection failures and timeouts raise
    ``httpx.RequestError`` subclasses.  Classifying them is AuthServer's job.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SEC,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Accept": "application/json"},
        )

    async def post(self, url: str, data: dict[str, str]) -> httpx.Response:
        response = await self._client.post(url, data=data)
        response.raise_for_status()
        return response

    async def aclose(self) -> None:
        await self._client.aclose()
