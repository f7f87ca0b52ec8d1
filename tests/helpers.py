"""Test doubles and builders shared by unit and API tests."""

import copy
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.bk_common.datetime_utils import compact_date, utc_now
from src.bk_gateway.auth.gate import Actor
from src.bk_order.domain.models import Address, ClientInfo, Order, OrderItem
from src.bk_order.domain.repository import OrderFilter

ADMIN = Actor(id="admin-1", role="admin")
SUPERUSER = Actor(id="super-1", role="superuser")
CUSTOMER_SERVICE = Actor(id="cs-1", role="customerService")
STAFF = Actor(id="staff-1", role="staff")
CUSTOMER = Actor(id="cust-1", role="user")
OTHER_CUSTOMER = Actor(id="cust-2", role="user")


def _matches(order: Order, f: OrderFilter) -> bool:
    if f.user_id is not None and order.user_id != f.user_id:
        return False
    if f.status is not None and order.status != f.status:
        return False
    if f.delivery_type is not None and order.delivery_type != f.delivery_type:
        return False
    if f.payment_status is not None and order.payment_status != f.payment_status:
        return False
    if f.from_date is not None and order.created_at < f.from_date:
        return False
    if f.to_date is not None and order.created_at > f.to_date:
        return False
    return True


class InMemoryOrderRepository:
    """OrderRepositoryProtocol over a dict, with the same version semantics as the SQL one."""

    def __init__(self) -> None:
        self.orders: dict[str, Order] = {}

    async def save(self, order: Order, db: Any) -> None:
        self.orders[order.id] = copy.deepcopy(order)

    async def get_by_id(self, order_id: str, db: Any) -> Order | None:
        order = self.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def update(self, order: Order, expected_version: int, db: Any) -> Order | None:
        stored = self.orders.get(order.id)
        if stored is None or stored.version != expected_version:
            return None
        updated = copy.deepcopy(order)
        updated.version = expected_version + 1
        updated.updated_at = utc_now()
        self.orders[order.id] = updated
        return copy.deepcopy(updated)

    async def delete(self, order_id: str, db: Any) -> bool:
        return self.orders.pop(order_id, None) is not None

    async def list_orders(
        self, filters: OrderFilter, offset: int, limit: int, db: Any
    ) -> list[Order]:
        found = sorted(
            (o for o in self.orders.values() if _matches(o, filters)),
            key=lambda o: o.created_at,
            reverse=True,
        )
        return [copy.deepcopy(o) for o in found[offset:offset + limit]]

    async def count_orders(self, filters: OrderFilter, db: Any) -> int:
        return sum(1 for o in self.orders.values() if _matches(o, filters))


class SequentialOrderNumbers:
    def __init__(self, prefix: str = "MF") -> None:
        self._prefix = prefix
        self._seq = 0

    async def next_number(self, now: datetime) -> str:
        self._seq += 1
        return f"{self._prefix}-{compact_date(now)}-{self._seq:04d}"


def make_order(**kwargs: Any) -> Order:
    """A stored-looking pickup order at 100.00 subtotal, owned by CUSTOMER."""
    now = kwargs.pop("created_at", utc_now())
    defaults: dict[str, Any] = dict(
        id="order-1",
        order_number="MF-20261018-0001",
        user_id=CUSTOMER.id,
        client_info=ClientInfo("Marie", "Tremblay", "marie@example.com", "514-555-0100"),
        pickup_location="Montreal",
        delivery_type="pickup",
        items=[OrderItem(1, "Croissant box", 2, Decimal("50"), Decimal("100"))],
        subtotal=Decimal("100"),
        tax_amount=Decimal("14.975"),
        delivery_fee=Decimal("0"),
        total=Decimal("114.975"),
        deposit_amount=Decimal("57.4875"),
        payment_type="deposit",
        created_at=now,
        updated_at=now,
    )
    defaults.update(kwargs)
    return Order(**defaults)


def make_delivery_order(**kwargs: Any) -> Order:
    kwargs.setdefault("delivery_type", "delivery")
    kwargs.setdefault("delivery_address", Address("1 rue Principale", "Laval", "QC", "H7X 1A1"))
    kwargs.setdefault("delivery_fee", Decimal("15"))
    return make_order(**kwargs)


def order_payload(**overrides: Any) -> dict[str, Any]:
    """JSON body for POST /orders: one 100.00 line, pickup, full payment."""
    body: dict[str, Any] = {
        "client_info": {
            "first_name": "Marie",
            "last_name": "Tremblay",
            "email": "marie@example.com",
            "phone": "514-555-0100",
        },
        "pickup_location": "Montreal",
        "delivery_type": "pickup",
        "items": [
            {
                "product_id": 1,
                "product_name": "Croissant box",
                "quantity": 2,
                "unit_price": "50",
                "amount": "100",
            }
        ],
        "payment_type": "full",
    }
    body.update(overrides)
    return body
