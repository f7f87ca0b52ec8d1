# src/bk_order/domain/repository.py
"""OrderRepository Protocol — interface contract for persistence layer."""
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_order.domain.models import Order


@dataclass(frozen=True)
class OrderFilter:
    user_id: str | None = None  # set -> restrict to this owner
    status: str | None = None
    delivery_type: str | None = None
    payment_status: str | None = None
    from_date: datetime | None = None  # inclusive, on created_at
    to_date: datetime | None = None  # inclusive, on created_at


class OrderRepositoryProtocol(Protocol):
    async def save(self, order: Order, db: AsyncSession) -> None: ...

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None: ...

    async def update(self, order: Order, expected_version: int, db: AsyncSession) -> Order | None:
        """Persist mutable fields iff the stored version still equals expected_version.

        Returns the stored order (version bumped) or None on a version mismatch.
        """
        ...

    async def delete(self, order_id: str, db: AsyncSession) -> bool: ...

    async def list_orders(
        self, filters: OrderFilter, offset: int, limit: int, db: AsyncSession
    ) -> list[Order]: ...

    async def count_orders(self, filters: OrderFilter, db: AsyncSession) -> int: ...


class OrderNumberGeneratorProtocol(Protocol):
    async def next_number(self, now: datetime) -> str: ...
