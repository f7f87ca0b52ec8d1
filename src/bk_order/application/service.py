# src/bk_order/application/service.py
"""OrderApplicationService — order use cases.

Order of work for create_order:
  items check → zone fee + minimum (delivery only) → pricing → initial
  payment flags → order number → INSERT + COMMIT → receipt dispatch.

The receipt is only dispatched once the order is committed, and its outcome
never changes the response.
"""

import logging
import math
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.datetime_utils import ensure_utc, utc_now
from src.bk_common.enums import DeliveryType, OrderStatus
from src.bk_common.errors import (
    AppError,
    DeliveryZoneUnavailableError,
    EmptyOrderItemsError,
    InvalidDateRangeError,
    MinimumOrderNotMetError,
    OrderNotFoundError,
    PostalCodeNotServicedError,
    StaleOrderError,
)
from src.bk_delivery.domain.models import FeeResolution, MinimumCheck
from src.bk_delivery.domain.resolver import DeliveryZoneResolverProtocol
from src.bk_gateway.auth.gate import (
    Actor,
    can_read_all_orders,
    ensure_can_delete_order,
    ensure_can_read_order,
    ensure_can_update_order,
)
from src.bk_order.application.schemas import (
    CreateOrderRequest,
    DeliveryValidationResponse,
    DeliveryZoneResponse,
    OrderListResponse,
    OrderResponse,
    UpdateOrderRequest,
)
from src.bk_order.domain.lifecycle import apply_payment_flags, apply_status, initial_payment_flags
from src.bk_order.domain.models import Address, ClientInfo, Order, OrderItem
from src.bk_order.domain.pricing import compute_pricing, compute_subtotal
from src.bk_order.domain.repository import (
    OrderFilter,
    OrderNumberGeneratorProtocol,
    OrderRepositoryProtocol,
)
from src.bk_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class ReceiptDispatcherProtocol(Protocol):
    def dispatch(self, order: Order) -> object: ...


class OrderApplicationService:
    """One instance per process, built in the app lifespan."""

    def __init__(
        self,
        resolver: DeliveryZoneResolverProtocol,
        numbers: OrderNumberGeneratorProtocol,
        dispatcher: ReceiptDispatcherProtocol | None = None,
        repo: OrderRepositoryProtocol | None = None,
        strict_transitions: bool = False,
        default_page_size: int = 20,
    ) -> None:
        self._resolver = resolver
        self._numbers = numbers
        self._dispatcher = dispatcher
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._strict = strict_transitions
        self._default_page_size = default_page_size

    # ------------------------------------------------------------------
    # Delivery zones
    # ------------------------------------------------------------------

    async def _resolve_fee(self, postal_code: str) -> FeeResolution:
        try:
            return await self._resolver.resolve_fee(postal_code)
        except AppError:
            raise
        except Exception as exc:
            logger.exception("Delivery fee lookup failed for %s", postal_code)
            raise DeliveryZoneUnavailableError(postal_code) from exc

    async def _check_minimum(self, postal_code: str, subtotal: Decimal) -> MinimumCheck:
        try:
            return await self._resolver.validate_minimum(postal_code, subtotal)
        except AppError:
            raise
        except Exception as exc:
            logger.exception("Minimum order lookup failed for %s", postal_code)
            raise DeliveryZoneUnavailableError(postal_code) from exc

    async def validate_delivery(
        self, postal_code: str, subtotal: Decimal
    ) -> DeliveryValidationResponse:
        """Zone and minimum check for a cart; never persists anything."""
        fee = await self._resolve_fee(postal_code)
        if not fee.is_valid:
            raise PostalCodeNotServicedError(postal_code)
        minimum = await self._check_minimum(postal_code, subtotal)
        return DeliveryValidationResponse.from_checks(postal_code, fee, minimum)

    async def list_delivery_zones(self) -> list[DeliveryZoneResponse]:
        zones = await self._resolver.list_zones()
        return [DeliveryZoneResponse.from_domain(z) for z in zones]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_order(
        self, db: AsyncSession, req: CreateOrderRequest, actor: Actor
    ) -> OrderResponse:
        if not req.items:
            raise EmptyOrderItemsError()

        items = [
            OrderItem(
                product_id=i.product_id,
                product_name=i.product_name,
                quantity=i.quantity,
                unit_price=i.unit_price,
                amount=i.amount,
                notes=i.notes,
            )
            for i in req.items
        ]

        delivery_fee = Decimal("0")
        address: Address | None = None
        if req.delivery_type == DeliveryType.DELIVERY.value and req.delivery_address:
            postal_code = req.delivery_address.postal_code
            fee = await self._resolve_fee(postal_code)
            if not fee.is_valid:
                raise PostalCodeNotServicedError(postal_code)
            minimum = await self._check_minimum(postal_code, compute_subtotal(items))
            if not minimum.is_valid:
                raise MinimumOrderNotMetError(postal_code, minimum.minimum_order, minimum.shortfall)
            delivery_fee = fee.fee
            address = Address(
                street=req.delivery_address.street,
                city=req.delivery_address.city,
                province=req.delivery_address.province,
                postal_code=postal_code,
            )

        pricing = compute_pricing(items, req.delivery_type, delivery_fee)
        deposit_paid, balance_paid = initial_payment_flags(req.payment_type, req.deposit_paid)
        now = utc_now()

        order = Order(
            id=str(uuid.uuid4()),
            order_number=await self._numbers.next_number(now),
            user_id=actor.id,
            client_info=ClientInfo(
                first_name=req.client_info.first_name,
                last_name=req.client_info.last_name,
                email=str(req.client_info.email),
                phone=req.client_info.phone,
            ),
            pickup_location=req.pickup_location,
            delivery_type=req.delivery_type,
            items=items,
            subtotal=pricing.subtotal,
            tax_amount=pricing.tax_amount,
            delivery_fee=pricing.delivery_fee,
            total=pricing.total,
            deposit_amount=pricing.deposit_amount,
            payment_type=req.payment_type,
            delivery_address=address,
            pickup_date=ensure_utc(req.pickup_date),
            deposit_paid=deposit_paid,
            deposit_paid_at=now if deposit_paid else None,
            balance_paid=balance_paid,
            balance_paid_at=now if balance_paid else None,
            status=OrderStatus.PENDING.value,
            notes=req.notes,
            payment_id=req.payment_id,
            invoice_url=req.invoice_url,
            created_at=now,
            updated_at=now,
        )

        try:
            await self._repo.save(order, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Order %s created by %s (%s, total=%s, payment=%s)",
            order.order_number, actor.id, order.delivery_type, order.total, order.payment_status,
        )
        if self._dispatcher is not None:
            self._dispatcher.dispatch(order)
        return OrderResponse.from_domain(order)

    async def update_order(
        self, db: AsyncSession, order_id: str, patch: UpdateOrderRequest, actor: Actor
    ) -> OrderResponse:
        ensure_can_update_order(actor)

        order = await self._repo.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        if not patch.model_fields_set:
            return OrderResponse.from_domain(order)
        expected_version = order.version

        if patch.status is not None:
            apply_status(order, patch.status, self._strict)
        apply_payment_flags(order, patch.deposit_paid, patch.balance_paid, utc_now())
        if "notes" in patch.model_fields_set:
            order.notes = patch.notes
        if patch.payment_id is not None:
            order.payment_id = patch.payment_id
        if patch.invoice_id is not None:
            order.invoice_id = patch.invoice_id

        try:
            updated = await self._repo.update(order, expected_version, db)
            if updated is None:
                # zero rows: either a newer version or a concurrent delete
                if await self._repo.get_by_id(order_id, db) is None:
                    raise OrderNotFoundError(order_id)
                raise StaleOrderError(order_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Order %s updated by %s (status=%s, payment=%s, v%d)",
            updated.order_number, actor.id, updated.status, updated.payment_status, updated.version,
        )
        return OrderResponse.from_domain(updated)

    async def delete_order(self, db: AsyncSession, order_id: str, actor: Actor) -> None:
        ensure_can_delete_order(actor)

        try:
            deleted = await self._repo.delete(order_id, db)
            if not deleted:
                raise OrderNotFoundError(order_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Order %s deleted by %s", order_id, actor.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_order(self, db: AsyncSession, order_id: str, actor: Actor) -> OrderResponse:
        order = await self._repo.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        ensure_can_read_order(actor, order.user_id)
        return OrderResponse.from_domain(order)

    async def list_orders(
        self,
        db: AsyncSession,
        actor: Actor,
        page: int = 1,
        limit: int | None = None,
        status: str | None = None,
        delivery_type: str | None = None,
        payment_status: str | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
    ) -> OrderListResponse:
        from_date, to_date = ensure_utc(from_date), ensure_utc(to_date)
        if from_date and to_date and from_date > to_date:
            raise InvalidDateRangeError()
        limit = limit or self._default_page_size

        filters = OrderFilter(
            user_id=None if can_read_all_orders(actor) else actor.id,
            status=status,
            delivery_type=delivery_type,
            payment_status=payment_status,
            from_date=from_date,
            to_date=to_date,
        )
        orders = await self._repo.list_orders(filters, (page - 1) * limit, limit, db)
        total = await self._repo.count_orders(filters, db)
        return OrderListResponse(
            items=[OrderResponse.from_domain(o) for o in orders],
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
        )
