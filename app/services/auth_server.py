"""Authorization-code grant against Exact Online.

Flow for one authentication attempt:

  init-auth       build_authorization_link(session_token)
                  → user is sent to Exact and approves the connection
  callback        exchange_code_for_token(code, shop_id=..., session_token=...)
                  → TokenRecord on success, or one of the AuthError variants

There are no retries: a failed exchange sends the user back to init-auth.

Failure classification:

  httpx.RequestError (connect error, timeout, ...)      → UnknownError
  httpx.HTTPStatusError with {"error", "error_description"} → RemoteError
  anything else (non-JSON error body, 2xx missing fields) → UnknownError
"""

from __future__ import annotations

import logging
import time
from urllib.parse import urlencode

import httpx

from app.core.config import DEFAULT_EXACT_BASE_URL
from app.core.metrics import AUTH_TOKEN_EXCHANGE_DURATION, AUTH_TOKEN_EXCHANGES
from app.models.auth_error import AuthError, RemoteError, UnknownError
from app.models.authorization import TokenRecord
from app.models.shop import ShopId
from app.services.exact_client import AuthClient

logger = logging.getLogger(__name__)

AUTHORIZE_PATH = "/api/oauth2/auth"
TOKEN_PATH = "/api/oauth2/token"


class AuthServer:
    def __init__(
        self,
        client: AuthClient,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        *,
        base_url: str = DEFAULT_EXACT_BASE_URL,
    ) -> None:
        self._client = client
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._base_url = base_url.rstrip("/")

    @property
    def authorization_endpoint(self) -> str:
        return f"{self._base_url}{AUTHORIZE_PATH}"

    @property
    def token_endpoint(self) -> str:
        return f"{self._base_url}{TOKEN_PATH}"

    def callback_uri(self, session_token: str | None = None) -> str:
        """Our own redirect URI, bound to ``session_token`` when given."""
        if session_token is None:
            return self._redirect_uri
        return f"{self._redirect_uri}?{urlencode({'session_token': session_token})}"

    def build_authorization_link(self, session_token: str) -> str:
        query = urlencode(
            {
                "client_id": self._client_id,
                "redirect_uri": self.callback_uri(session_token),
                "response_type": "code",
            }
        )
        return f"{self.authorization_endpoint}?{query}"

    async def exchange_code_for_token(
        self,
        code: str,
        *,
        shop_id: ShopId,
        session_token: str | None = None,
    ) -> TokenRecord | AuthError:
        # Exact requires the redirect_uri to match the one in the link.
        form = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.callback_uri(session_token),
        }

        start = time.monotonic()
        try:
            response = await self._client.post(self.token_endpoint, data=form)
        except httpx.HTTPStatusError as error:
            outcome = _error_from_response(error.response)
        except httpx.RequestError as error:
            logger.warning(
                "Exact token request failed  shop_id=%s error=%s",
                shop_id,
                type(error).__name__,
                extra={"shop_id": str(shop_id), "error_kind": UnknownError.kind},
            )
            outcome = UnknownError()
        else:
            outcome = _token_record_from_response(response, shop_id)
        AUTH_TOKEN_EXCHANGE_DURATION.observe(time.monotonic() - start)

        if isinstance(outcome, TokenRecord):
            AUTH_TOKEN_EXCHANGES.labels(result="success").inc()
            logger.info(
                "Exact token exchange succeeded  shop_id=%s expires_at=%d",
                shop_id,
                outcome.expires_at,
                extra={"shop_id": str(shop_id)},
            )
        else:
            AUTH_TOKEN_EXCHANGES.labels(result=f"{outcome.kind}_error").inc()
            logger.warning(
                "Exact token exchange failed  shop_id=%s kind=%s title=%s",
                shop_id,
                outcome.kind,
                outcome.title,
                extra={"shop_id": str(shop_id), "error_kind": outcome.kind},
            )
        return outcome

    async def aclose(self) -> None:
        await self._client.aclose()


def _json_object(response: httpx.Response) -> dict | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _error_from_response(response: httpx.Response) -> AuthError:
    payload = _json_object(response)
    if payload is None:
        logger.warning(
            "Exact returned HTTP %d with a non-JSON body", response.status_code
        )
        return UnknownError()

    error = payload.get("error")
    if not isinstance(error, str) or not error:
        logger.warning(
            "Exact returned HTTP %d without an error code", response.status_code
        )
        return UnknownError()

    description = payload.get("error_description")
    return RemoteError(
        status=str(response.status_code),
        title=error,
        detail=description if isinstance(description, str) else "",
    )


def _parse_expires_in(raw: object) -> int | None:
    # Exact sends expires_in as a string ("600"); RFC 6749 says integer.
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.isascii() and raw.strip().isdigit():
        try:
            return int(raw)
        except ValueError:  # over the int() digit limit
            return None
    return None


def _token_record_from_response(
    response: httpx.Response, shop_id: ShopId
) -> TokenRecord | UnknownError:
    payload = _json_object(response)
    if payload is None:
        logger.warning("Exact token response is not a JSON object")
        return UnknownError()

    access_token = payload.get("access_token")
    refresh_token = payload.get("refresh_token")
    token_type = payload.get("token_type")
    expires_in = _parse_expires_in(payload.get("expires_in"))

    if not isinstance(access_token, str) or not access_token:
        logger.warning("Exact token response missing access_token")
        return UnknownError()
    if not isinstance(refresh_token, str) or not refresh_token:
        logger.warning("Exact token response missing refresh_token")
        return UnknownError()
    if not isinstance(token_type, str) or not token_type:
        logger.warning("Exact token response missing token_type")
        return UnknownError()
    if expires_in is None:
        logger.warning("Exact token response missing expires_in")
        return UnknownError()

    return TokenRecord(
        shop_id=shop_id,
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=int(time.time()) + expires_in,
        token_type=token_type,
    )
