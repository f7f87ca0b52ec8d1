# src/bk_order/application/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from src.bk_common.money import money_to_display
from src.bk_delivery.domain.models import DeliveryZone, FeeResolution, MinimumCheck
from src.bk_order.domain.models import Order

OrderStatusLiteral = Literal[
    "pending", "confirmed", "in_production", "ready", "completed", "cancelled", "delivered"
]

_POSTAL_CODE_PATTERN = r"(?i)^[A-Z]\d[A-Z](\s?\d[A-Z]\d)?$"


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ClientInfoIn(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=7, pattern=r"^[\d\s\-().+]+$")


class AddressIn(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    province: str = Field(..., min_length=2, max_length=2)
    postal_code: str = Field(..., min_length=3, max_length=7, pattern=_POSTAL_CODE_PATTERN)

    @field_validator("postal_code")
    @classmethod
    def upper_postal_code(cls, v: str) -> str:
        return v.upper()


class OrderItemIn(BaseModel):
    product_id: int = Field(..., gt=0)
    product_name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    amount: Decimal = Field(..., ge=0)
    notes: str | None = None


class CreateOrderRequest(BaseModel):
    client_info: ClientInfoIn
    pickup_date: datetime | None = None
    pickup_location: Literal["Montreal", "Laval"]
    delivery_type: Literal["pickup", "delivery"]
    delivery_address: AddressIn | None = None
    # Emptiness is checked by the service so it gets its own error code.
    items: list[OrderItemIn]
    notes: str | None = None
    payment_type: Literal["full", "deposit", "invoice"] = "full"
    deposit_paid: bool = False  # intent: the charge went through at checkout
    payment_id: str | None = None
    invoice_url: str | None = None

    @model_validator(mode="after")
    def address_matches_delivery_type(self) -> "CreateOrderRequest":
        if self.delivery_type == "delivery" and self.delivery_address is None:
            raise ValueError("delivery_address is required for delivery orders")
        if self.delivery_type == "pickup" and self.delivery_address is not None:
            raise ValueError("delivery_address must be omitted for pickup orders")
        return self


class UpdateOrderRequest(BaseModel):
    """Partial update: only fields present in the body are applied."""

    status: OrderStatusLiteral | None = None
    notes: str | None = None
    deposit_paid: bool | None = None
    balance_paid: bool | None = None
    payment_id: str | None = None
    invoice_id: str | None = None


class ValidateDeliveryRequest(BaseModel):
    postal_code: str = Field(..., min_length=3)
    subtotal: Decimal = Field(..., ge=0)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    amount: Decimal
    notes: str | None = None


class ClientInfoOut(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str


class AddressOut(BaseModel):
    street: str
    city: str
    province: str
    postal_code: str


class MoneyDisplay(BaseModel):
    """Cent-rounded strings for UIs; the raw Decimal fields stay exact."""

    subtotal: str
    tax_amount: str
    delivery_fee: str
    total: str
    deposit_amount: str
    balance_due: str


class OrderResponse(BaseModel):
    id: str
    order_number: str
    user_id: str | None
    client_info: ClientInfoOut
    pickup_date: datetime | None = None
    pickup_location: str
    delivery_type: str
    delivery_address: AddressOut | None = None
    items: list[OrderItemOut]
    subtotal: Decimal
    tax_amount: Decimal
    delivery_fee: Decimal
    total: Decimal
    deposit_amount: Decimal
    payment_type: str
    deposit_paid: bool
    deposit_paid_at: datetime | None = None
    balance_paid: bool
    balance_paid_at: datetime | None = None
    payment_status: str
    status: str
    notes: str | None = None
    payment_id: str | None = None
    invoice_id: str | None = None
    invoice_url: str | None = None
    version: int
    display: MoneyDisplay
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        client = order.client_info
        address = order.delivery_address
        return cls(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            client_info=ClientInfoOut(
                first_name=client.first_name,
                last_name=client.last_name,
                email=client.email,
                phone=client.phone,
            ),
            pickup_date=order.pickup_date,
            pickup_location=order.pickup_location,
            delivery_type=order.delivery_type,
            delivery_address=AddressOut(
                street=address.street,
                city=address.city,
                province=address.province,
                postal_code=address.postal_code,
            ) if address else None,
            items=[
                OrderItemOut(
                    product_id=i.product_id,
                    product_name=i.product_name,
                    quantity=i.quantity,
                    unit_price=i.unit_price,
                    amount=i.amount,
                    notes=i.notes,
                )
                for i in order.items
            ],
            subtotal=order.subtotal,
            tax_amount=order.tax_amount,
            delivery_fee=order.delivery_fee,
            total=order.total,
            deposit_amount=order.deposit_amount,
            payment_type=order.payment_type,
            deposit_paid=order.deposit_paid,
            deposit_paid_at=order.deposit_paid_at,
            balance_paid=order.balance_paid,
            balance_paid_at=order.balance_paid_at,
            payment_status=order.payment_status,
            status=order.status,
            notes=order.notes,
            payment_id=order.payment_id,
            invoice_id=order.invoice_id,
            invoice_url=order.invoice_url,
            version=order.version,
            display=MoneyDisplay(
                subtotal=money_to_display(order.subtotal),
                tax_amount=money_to_display(order.tax_amount),
                delivery_fee=money_to_display(order.delivery_fee),
                total=money_to_display(order.total),
                deposit_amount=money_to_display(order.deposit_amount),
                balance_due=money_to_display(order.balance_due),
            ),
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    page: int
    limit: int
    total: int
    total_pages: int


class DeliveryValidationResponse(BaseModel):
    postal_code: str
    is_valid: bool
    zone_name: str
    delivery_fee: Decimal
    minimum_order: Decimal
    meets_minimum: bool
    shortfall: Decimal

    @classmethod
    def from_checks(
        cls, postal_code: str, fee: FeeResolution, minimum: MinimumCheck
    ) -> "DeliveryValidationResponse":
        return cls(
            postal_code=postal_code,
            is_valid=fee.is_valid,
            zone_name=fee.zone_name,
            delivery_fee=fee.fee,
            minimum_order=fee.minimum_order,
            meets_minimum=minimum.is_valid,
            shortfall=minimum.shortfall,
        )


class DeliveryZoneResponse(BaseModel):
    name: str
    postal_prefixes: list[str]
    delivery_fee: Decimal
    minimum_order: Decimal

    @classmethod
    def from_domain(cls, zone: DeliveryZone) -> "DeliveryZoneResponse":
        return cls(
            name=zone.name,
            postal_prefixes=list(zone.postal_prefixes),
            delivery_fee=zone.delivery_fee,
            minimum_order=zone.minimum_order,
        )
