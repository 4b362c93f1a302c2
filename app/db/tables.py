"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in app/models/.
Repos convert between SQLAlchemy rows and domain dataclasses.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.engine import Base


class TokenRow(Base):
    """Exact credentials issued to a shop.  One row per shop (upserted)."""

    __tablename__ = "tokens"

    shop_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[int] = mapped_column(Integer, nullable=False)
    token_type: Mapped[str] = mapped_column(String(32), nullable=False)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)
