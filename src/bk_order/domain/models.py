"""Order domain model — pure dataclasses, no SQLAlchemy dependency."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.bk_order.domain.lifecycle import derive_payment_status


@dataclass(frozen=True)
class OrderItem:
    product_id: int
    product_name: str
    quantity: int  # > 0
    unit_price: Decimal  # >= 0
    amount: Decimal  # quantity * unit_price, supplied by the caller
    notes: str | None = None


@dataclass(frozen=True)
class ClientInfo:
    """Purchaser snapshot taken at creation; not linked to the live profile."""

    first_name: str
    last_name: str
    email: str
    phone: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class Address:
    street: str
    city: str
    province: str
    postal_code: str


@dataclass
class Order:
    id: str
    order_number: str
    user_id: str | None
    client_info: ClientInfo
    pickup_location: str  # Montreal / Laval
    delivery_type: str  # pickup / delivery
    items: list[OrderItem]
    # Money, computed once at creation
    subtotal: Decimal
    tax_amount: Decimal
    delivery_fee: Decimal
    total: Decimal
    deposit_amount: Decimal
    payment_type: str  # full / deposit / invoice
    delivery_address: Address | None = None
    pickup_date: datetime | None = None
    # Payment flags: false -> true only
    deposit_paid: bool = False
    deposit_paid_at: datetime | None = None
    balance_paid: bool = False
    balance_paid_at: datetime | None = None
    status: str = "pending"
    notes: str | None = None
    # External payment/invoice references
    payment_id: str | None = None
    invoice_id: str | None = None
    invoice_url: str | None = None
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    payment_status: str = field(init=False)

    def __post_init__(self) -> None:
        self.refresh_payment_status()

    def refresh_payment_status(self) -> None:
        self.payment_status = derive_payment_status(self.deposit_paid, self.balance_paid).value

    @property
    def balance_due(self) -> Decimal:
        return self.total - self.deposit_amount
