from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ShopId:
    """Identity of a shop integrating with Exact."""

    value: UUID

    @staticmethod
    def from_string(raw: str) -> ShopId:
        return ShopId(UUID(raw))

    def __str__(self) -> str:
        return str(self.value)
