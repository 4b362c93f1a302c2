"""PostgreSQL implementation of TokenRepo."""

from __future__ import annotations

import datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import TokenRow
from app.models.authorization import TokenRecord
from app.models.shop import ShopId


class PgTokenRepo:
    """Satisfies the TokenRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, record: TokenRecord) -> None:
        """Insert the shop's tokens, or overwrite them if a row exists.

        A single INSERT ... ON CONFLICT keeps concurrent callbacks for the
        same shop from racing on a select-then-write; the last one wins.
        """
        now = int(datetime.datetime.now(datetime.UTC).timestamp())
        values = {
            "shop_id": record.shop_id.value,
            "access_token": record.access_token,
            "refresh_token": record.refresh_token,
            "expires_at": record.expires_at,
            "token_type": record.token_type,
            "updated_at": now,
        }
        stmt = insert(TokenRow).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[TokenRow.shop_id],
            set_={
                "access_token": stmt.excluded.access_token,
                "refresh_token": stmt.excluded.refresh_token,
                "expires_at": stmt.excluded.expires_at,
                "token_type": stmt.excluded.token_type,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self._session.execute(stmt)
        await self._session.flush()

    async def get(self, shop_id: ShopId) -> TokenRecord | None:
        stmt = select(TokenRow).where(TokenRow.shop_id == shop_id.value)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_token_record(row)


def _row_to_token_record(row: TokenRow) -> TokenRecord:
    return TokenRecord(
        shop_id=ShopId(row.shop_id),
        access_token=row.access_token,
        refresh_token=row.refresh_token,
        expires_at=row.expires_at,
        token_type=row.token_type,
    )
