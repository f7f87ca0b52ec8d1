# src/bk_order/infrastructure/persistence.py
"""OrderRepository — raw SQL persistence implementation.

Line items, client snapshot and delivery address are JSONB documents; money
columns are unconstrained NUMERIC so Decimals round-trip exactly (amounts
inside JSONB are stored as strings for the same reason).
"""
import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.money import to_money
from src.bk_order.domain.models import Address, ClientInfo, Order, OrderItem
from src.bk_order.domain.repository import OrderFilter

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, order_number, user_id, client_info, pickup_date, pickup_location,
    delivery_type, delivery_address, items,
    subtotal, tax_amount, delivery_fee, total, deposit_amount,
    payment_type, deposit_paid, deposit_paid_at, balance_paid, balance_paid_at,
    payment_status, status, notes, payment_id, invoice_id, invoice_url,
    version, created_at, updated_at
"""

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, order_number, user_id, client_info, pickup_date,
        pickup_location, delivery_type, delivery_address, items,
        subtotal, tax_amount, delivery_fee, total, deposit_amount,
        payment_type, deposit_paid, deposit_paid_at, balance_paid, balance_paid_at,
        payment_status, status, notes, payment_id, invoice_id, invoice_url,
        version, created_at, updated_at)
    VALUES (:id, :order_number, :user_id, CAST(:client_info AS JSONB), :pickup_date,
        :pickup_location, :delivery_type, CAST(:delivery_address AS JSONB),
        CAST(:items AS JSONB),
        :subtotal, :tax_amount, :delivery_fee, :total, :deposit_amount,
        :payment_type, :deposit_paid, :deposit_paid_at, :balance_paid, :balance_paid_at,
        :payment_status, :status, :notes, :payment_id, :invoice_id, :invoice_url,
        0, :created_at, :created_at)
""")

# Optimistic concurrency: only the writer holding the current version wins.
_UPDATE_ORDER_SQL = text(f"""
    UPDATE orders
    SET status = :status, notes = :notes,
        deposit_paid = :deposit_paid, deposit_paid_at = :deposit_paid_at,
        balance_paid = :balance_paid, balance_paid_at = :balance_paid_at,
        payment_status = :payment_status,
        payment_id = :payment_id, invoice_id = :invoice_id,
        version = version + 1, updated_at = NOW()
    WHERE id = :id AND version = :expected_version
    RETURNING {_COLUMNS}
""")

_DELETE_ORDER_SQL = text("DELETE FROM orders WHERE id = :id")

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM orders WHERE id = :id
""")

_FILTER_CLAUSE = """
    WHERE (CAST(:user_id AS TEXT) IS NULL OR user_id = :user_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:delivery_type AS TEXT) IS NULL OR delivery_type = :delivery_type)
      AND (CAST(:payment_status AS TEXT) IS NULL OR payment_status = :payment_status)
      AND (CAST(:from_date AS TIMESTAMPTZ) IS NULL OR created_at >= :from_date)
      AND (CAST(:to_date AS TIMESTAMPTZ) IS NULL OR created_at <= :to_date)
"""

_LIST_ORDERS_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM orders
    {_FILTER_CLAUSE}
    ORDER BY created_at DESC, id DESC
    OFFSET :offset
    LIMIT :limit
""")

_COUNT_ORDERS_SQL = text(f"""
    SELECT COUNT(*) FROM orders
    {_FILTER_CLAUSE}
""")


# ---------------------------------------------------------------------------
# Mappers
# ---------------------------------------------------------------------------


def _load_json(value: Any) -> Any:
    """JSONB may come back decoded or as text depending on driver codecs."""
    if isinstance(value, str):
        return json.loads(value)
    return value


def _item_to_doc(item: OrderItem) -> dict[str, Any]:
    return {
        "product_id": item.product_id,
        "product_name": item.product_name,
        "quantity": item.quantity,
        "unit_price": str(item.unit_price),
        "amount": str(item.amount),
        "notes": item.notes,
    }


def _doc_to_item(doc: dict[str, Any]) -> OrderItem:
    return OrderItem(
        product_id=int(doc["product_id"]),
        product_name=doc["product_name"],
        quantity=int(doc["quantity"]),
        unit_price=to_money(doc["unit_price"]),
        amount=to_money(doc["amount"]),
        notes=doc.get("notes"),
    )


def _client_to_doc(client: ClientInfo) -> dict[str, str]:
    return {
        "first_name": client.first_name,
        "last_name": client.last_name,
        "email": client.email,
        "phone": client.phone,
    }


def _address_to_doc(address: Address | None) -> dict[str, str] | None:
    if address is None:
        return None
    return {
        "street": address.street,
        "city": address.city,
        "province": address.province,
        "postal_code": address.postal_code,
    }


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    address_doc = _load_json(row.delivery_address)
    return Order(
        id=str(row.id),
        order_number=row.order_number,
        user_id=row.user_id,
        client_info=ClientInfo(**_load_json(row.client_info)),
        pickup_date=row.pickup_date,
        pickup_location=row.pickup_location,
        delivery_type=row.delivery_type,
        delivery_address=Address(**address_doc) if address_doc else None,
        items=[_doc_to_item(doc) for doc in _load_json(row.items)],
        subtotal=to_money(row.subtotal),
        tax_amount=to_money(row.tax_amount),
        delivery_fee=to_money(row.delivery_fee),
        total=to_money(row.total),
        deposit_amount=to_money(row.deposit_amount),
        payment_type=row.payment_type,
        deposit_paid=row.deposit_paid,
        deposit_paid_at=row.deposit_paid_at,
        balance_paid=row.balance_paid,
        balance_paid_at=row.balance_paid_at,
        status=row.status,
        notes=row.notes,
        payment_id=row.payment_id,
        invoice_id=row.invoice_id,
        invoice_url=row.invoice_url,
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _filter_params(filters: OrderFilter) -> dict[str, Any]:
    return {
        "user_id": filters.user_id,
        "status": filters.status,
        "delivery_type": filters.delivery_type,
        "payment_status": filters.payment_status,
        "from_date": filters.from_date,
        "to_date": filters.to_date,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, order: Order, db: AsyncSession) -> None:
        address_doc = _address_to_doc(order.delivery_address)
        await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "order_number": order.order_number,
                "user_id": order.user_id,
                "client_info": json.dumps(_client_to_doc(order.client_info)),
                "pickup_date": order.pickup_date,
                "pickup_location": order.pickup_location,
                "delivery_type": order.delivery_type,
                "delivery_address": json.dumps(address_doc) if address_doc else None,
                "items": json.dumps([_item_to_doc(i) for i in order.items]),
                "subtotal": order.subtotal,
                "tax_amount": order.tax_amount,
                "delivery_fee": order.delivery_fee,
                "total": order.total,
                "deposit_amount": order.deposit_amount,
                "payment_type": order.payment_type,
                "deposit_paid": order.deposit_paid,
                "deposit_paid_at": order.deposit_paid_at,
                "balance_paid": order.balance_paid,
                "balance_paid_at": order.balance_paid_at,
                "payment_status": order.payment_status,
                "status": order.status,
                "notes": order.notes,
                "payment_id": order.payment_id,
                "invoice_id": order.invoice_id,
                "invoice_url": order.invoice_url,
                "created_at": order.created_at,
            },
        )

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def update(self, order: Order, expected_version: int, db: AsyncSession) -> Order | None:
        result = await db.execute(
            _UPDATE_ORDER_SQL,
            {
                "id": order.id,
                "expected_version": expected_version,
                "status": order.status,
                "notes": order.notes,
                "deposit_paid": order.deposit_paid,
                "deposit_paid_at": order.deposit_paid_at,
                "balance_paid": order.balance_paid,
                "balance_paid_at": order.balance_paid_at,
                "payment_status": order.payment_status,
                "payment_id": order.payment_id,
                "invoice_id": order.invoice_id,
            },
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def delete(self, order_id: str, db: AsyncSession) -> bool:
        result = await db.execute(_DELETE_ORDER_SQL, {"id": order_id})
        return bool(result.rowcount)

    async def list_orders(
        self, filters: OrderFilter, offset: int, limit: int, db: AsyncSession
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {**_filter_params(filters), "offset": offset, "limit": limit},
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def count_orders(self, filters: OrderFilter, db: AsyncSession) -> int:
        result = await db.execute(_COUNT_ORDERS_SQL, _filter_params(filters))
        return int(result.scalar_one())
