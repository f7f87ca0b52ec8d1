# tests/unit/test_order_persistence.py
"""Unit tests for OrderRepository using MagicMock AsyncSession."""
import json
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.bk_order.domain.repository import OrderFilter
from src.bk_order.infrastructure.persistence import OrderRepository
from tests.helpers import make_delivery_order, make_order


def _make_row(**kwargs: Any) -> MagicMock:
    """Create a mock row with all order columns."""
    now = datetime.now(UTC)
    row = MagicMock()
    row.id = kwargs.get("id", "order-1")
    row.order_number = kwargs.get("order_number", "MF-20261018-0001")
    row.user_id = kwargs.get("user_id", "cust-1")
    row.client_info = kwargs.get(
        "client_info",
        {"first_name": "Marie", "last_name": "Tremblay",
         "email": "marie@example.com", "phone": "514-555-0100"},
    )
    row.pickup_date = kwargs.get("pickup_date")
    row.pickup_location = kwargs.get("pickup_location", "Laval")
    row.delivery_type = kwargs.get("delivery_type", "pickup")
    row.delivery_address = kwargs.get("delivery_address")
    row.items = kwargs.get(
        "items",
        [{"product_id": 7, "product_name": "Gateau", "quantity": 1,
          "unit_price": "100", "amount": "100", "notes": None}],
    )
    row.subtotal = kwargs.get("subtotal", Decimal("100"))
    row.tax_amount = kwargs.get("tax_amount", Decimal("14.975"))
    row.delivery_fee = kwargs.get("delivery_fee", Decimal("0"))
    row.total = kwargs.get("total", Decimal("114.975"))
    row.deposit_amount = kwargs.get("deposit_amount", Decimal("57.4875"))
    row.payment_type = kwargs.get("payment_type", "deposit")
    row.deposit_paid = kwargs.get("deposit_paid", True)
    row.deposit_paid_at = kwargs.get("deposit_paid_at", now)
    row.balance_paid = kwargs.get("balance_paid", False)
    row.balance_paid_at = kwargs.get("balance_paid_at")
    row.payment_status = kwargs.get("payment_status", "deposit_paid")
    row.status = kwargs.get("status", "pending")
    row.notes = kwargs.get("notes")
    row.payment_id = kwargs.get("payment_id", "sq_1")
    row.invoice_id = kwargs.get("invoice_id")
    row.invoice_url = kwargs.get("invoice_url")
    row.version = kwargs.get("version", 0)
    row.created_at = kwargs.get("created_at", now)
    row.updated_at = kwargs.get("updated_at", now)
    return row


def _db_returning(row: Any) -> MagicMock:
    db = MagicMock()
    result = MagicMock()
    result.fetchone.return_value = row
    db.execute = AsyncMock(return_value=result)
    return db


class TestOrderRepository:
    async def test_save_serializes_documents(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock()
        order = make_delivery_order()
        await OrderRepository().save(order, db)

        params = db.execute.call_args[0][1]
        items = json.loads(params["items"])
        assert items[0]["amount"] == "100"
        assert json.loads(params["delivery_address"])["postal_code"] == "H7X 1A1"
        assert json.loads(params["client_info"])["email"] == "marie@example.com"
        assert params["total"] == order.total
        assert params["payment_status"] == "unpaid"

    async def test_save_pickup_has_null_address(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock()
        await OrderRepository().save(make_order(), db)
        assert db.execute.call_args[0][1]["delivery_address"] is None

    async def test_get_by_id_maps_row(self) -> None:
        order = await OrderRepository().get_by_id("order-1", _db_returning(_make_row()))
        assert order is not None
        assert order.client_info.full_name == "Marie Tremblay"
        assert order.items[0].unit_price == Decimal("100")
        assert order.payment_status == "deposit_paid"
        assert order.delivery_address is None

    async def test_get_by_id_accepts_json_text(self) -> None:
        row = _make_row(
            client_info=json.dumps({"first_name": "A", "last_name": "B",
                                    "email": "a@b.ca", "phone": "5145550100"}),
            delivery_type="delivery",
            delivery_address=json.dumps({"street": "1 rue", "city": "Laval",
                                         "province": "QC", "postal_code": "H7X 1A1"}),
            items=json.dumps([{"product_id": 1, "product_name": "Pain", "quantity": 2,
                               "unit_price": "3.50", "amount": "7.00"}]),
        )
        order = await OrderRepository().get_by_id("order-1", _db_returning(row))
        assert order is not None
        assert order.delivery_address is not None
        assert order.delivery_address.city == "Laval"
        assert order.items[0].amount == Decimal("7.00")
        assert order.items[0].notes is None

    async def test_get_by_id_not_found(self) -> None:
        assert await OrderRepository().get_by_id("x", _db_returning(None)) is None

    async def test_update_passes_expected_version(self) -> None:
        db = _db_returning(_make_row(version=4))
        order = make_order(version=3)
        updated = await OrderRepository().update(order, 3, db)
        params = db.execute.call_args[0][1]
        assert params["expected_version"] == 3
        assert updated is not None
        assert updated.version == 4

    async def test_update_version_mismatch_returns_none(self) -> None:
        assert await OrderRepository().update(make_order(), 0, _db_returning(None)) is None

    @pytest.mark.parametrize("rowcount,expected", [(1, True), (0, False)])
    async def test_delete(self, rowcount: int, expected: bool) -> None:
        db = MagicMock()
        result = MagicMock()
        result.rowcount = rowcount
        db.execute = AsyncMock(return_value=result)
        assert await OrderRepository().delete("order-1", db) is expected

    async def test_count_orders_binds_delivery_and_payment_filters(self) -> None:
        db = MagicMock()
        result = MagicMock()
        result.scalar_one.return_value = 4
        db.execute = AsyncMock(return_value=result)

        filters = OrderFilter(delivery_type="delivery", payment_status="deposit_paid")
        assert await OrderRepository().count_orders(filters, db) == 4

        params = db.execute.call_args[0][1]
        assert params["delivery_type"] == "delivery"
        assert params["payment_status"] == "deposit_paid"
        assert params["user_id"] is None

    async def test_list_orders_passes_filters(self) -> None:
        db = MagicMock()
        result = MagicMock()
        result.fetchall.return_value = [_make_row(id="a"), _make_row(id="b")]
        db.execute = AsyncMock(return_value=result)

        filters = OrderFilter(user_id="cust-1", status="pending")
        orders = await OrderRepository().list_orders(filters, 20, 10, db)

        params = db.execute.call_args[0][1]
        assert params["user_id"] == "cust-1"
        assert params["status"] == "pending"
        assert params["delivery_type"] is None
        assert params["offset"] == 20
        assert params["limit"] == 10
        assert [o.id for o in orders] == ["a", "b"]

    async def test_count_orders(self) -> None:
        db = MagicMock()
        result = MagicMock()
        result.scalar_one.return_value = 7
        db.execute = AsyncMock(return_value=result)
        assert await OrderRepository().count_orders(OrderFilter(), db) == 7
