from __future__ import annotations

import json
import time
from dataclasses import dataclass

from app.models.shop import ShopId


@dataclass(frozen=True, slots=True)
class PendingAuthorization:
    """Context stored between init-auth and the Exact callback."""

    shop_id: ShopId
    redirect_uri: str

    def to_json(self) -> str:
        return json.dumps(
            {"shop_id": str(self.shop_id), "redirect_uri": self.redirect_uri}
        )

    @staticmethod
    def from_json(raw: str) -> PendingAuthorization:
        """Raises ValueError, KeyError, TypeError or AttributeError on a malformed payload."""
        payload = json.loads(raw)
        return PendingAuthorization(
            shop_id=ShopId.from_string(payload["shop_id"]),
            redirect_uri=str(payload["redirect_uri"]),
        )


@dataclass(frozen=True, slots=True)
class TokenRecord:
    shop_id: ShopId
    access_token: str
    refresh_token: str
    expires_at: int  # Unix seconds, UTC
    token_type: str

    def is_expired(self, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return current >= self.expires_at

    def __repr__(self) -> str:
        # Keep credentials out of tracebacks and debug logs.
        return (
            f"TokenRecord(shop_id={self.shop_id!s}, expires_at={self.expires_at}, "
            f"token_type={self.token_type!r})"
        )
