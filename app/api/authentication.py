from __future__ import annotations

import logging
from typing import Annotated
from urllib.parse import urlparse
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel, field_validator

from app.api.dependencies import (
    get_auth_server,
    get_authorization_session,
    get_token_repo,
)
from app.models.auth_error import AuthError, to_json_api
from app.models.authorization import PendingAuthorization, TokenRecord
from app.models.shop import ShopId
from app.repos.token_repo import TokenRepo
from app.services.auth_server import AuthServer
from app.services.authorization_session import AuthorizationSession

# ---------------------------------------------------------------------------
# Shop authentication against Exact Online
#
# Endpoints:
#   POST /public/init-auth     remember the shop, return Exact's consent link
#   GET  /public/authenticate  Exact's redirect target: exchange the code,
#                              store the tokens, send the user back
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["authentication"])


class InitAuthData(BaseModel):
    redirect_uri: str
    shop_id: UUID

    @field_validator("redirect_uri")
    @classmethod
    def _absolute_http_uri(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("redirect_uri must be an absolute http(s) URI")
        return value


class InitAuthRequest(BaseModel):
    data: InitAuthData


class AuthorizationLink(BaseModel):
    authorization_link: str


class InitAuthResponse(BaseModel):
    data: AuthorizationLink


def _error_response(error: AuthError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": [to_json_api(error)]},
    )


# ========================== POST /public/init-auth ========================


@router.post("/init-auth", response_model=InitAuthResponse)
async def init_auth(
    body: InitAuthRequest,
    auth_server: Annotated[AuthServer, Depends(get_auth_server)],
    authorization_session: Annotated[
        AuthorizationSession, Depends(get_authorization_session)
    ],
) -> InitAuthResponse:
    shop_id = ShopId(body.data.shop_id)
    session_token = await authorization_session.save(shop_id, body.data.redirect_uri)
    link = auth_server.build_authorization_link(session_token)

    logger.info(
        "Authorization link issued  shop_id=%s", shop_id, extra={"shop_id": str(shop_id)}
    )
    return InitAuthResponse(data=AuthorizationLink(authorization_link=link))


# ========================== GET /public/authenticate ======================
# Exact redirects the user's browser here with ?code=...; session_token is
# the query parameter we embedded in the redirect_uri at init-auth.


@router.get("/authenticate")
async def authenticate(
    auth_server: Annotated[AuthServer, Depends(get_auth_server)],
    authorization_session: Annotated[
        AuthorizationSession, Depends(get_authorization_session)
    ],
    token_repo: Annotated[TokenRepo, Depends(get_token_repo)],
    session_token: str = Query(...),
    code: str = Query(...),
) -> Response:
    pending = await authorization_session.fetch(session_token)
    if not isinstance(pending, PendingAuthorization):
        return _error_response(pending)

    outcome = await auth_server.exchange_code_for_token(
        code, shop_id=pending.shop_id, session_token=session_token
    )
    if not isinstance(outcome, TokenRecord):
        return _error_response(outcome)

    # Not atomic with the exchange: if this write fails the tokens are lost
    # and the shop has to authenticate again.
    await token_repo.upsert(outcome)

    logger.info(
        "Shop authenticated with Exact  shop_id=%s",
        pending.shop_id,
        extra={"shop_id": str(pending.shop_id)},
    )
    return RedirectResponse(url=pending.redirect_uri, status_code=status.HTTP_302_FOUND)
