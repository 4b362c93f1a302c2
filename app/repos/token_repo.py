from __future__ import annotations

from typing import Protocol

from app.models.authorization import TokenRecord
from app.models.shop import ShopId


class TokenRepo(Protocol):
    async def upsert(self, record: TokenRecord) -> None: ...
    async def get(self, shop_id: ShopId) -> TokenRecord | None: ...


class InMemoryTokenRepo:
    def __init__(self) -> None:
        self._by_shop_id: dict[ShopId, TokenRecord] = {}

    async def upsert(self, record: TokenRecord) -> None:
        """Insert or overwrite the record for ``record.shop_id``."""
        self._by_shop_id[record.shop_id] = record

    async def get(self, shop_id: ShopId) -> TokenRecord | None:
        return self._by_shop_id.get(shop_id)
