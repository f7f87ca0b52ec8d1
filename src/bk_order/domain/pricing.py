"""Order pricing: subtotal, tax, delivery fee, total and deposit.

All amounts are exact Decimals; nothing is rounded here. Callers guarantee a
non-empty item list with non-negative amounts before calling.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from src.bk_common.enums import DeliveryType
from src.bk_common.money import ZERO
from src.bk_order.domain.models import OrderItem

TAX_RATE = Decimal("0.14975")  # Quebec GST 5% + QST 9.975%
DEPOSIT_RATE = Decimal("0.5")


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    tax_amount: Decimal
    delivery_fee: Decimal
    total: Decimal
    deposit_amount: Decimal


def compute_subtotal(items: Iterable[OrderItem]) -> Decimal:
    return sum((item.amount for item in items), ZERO)


def compute_pricing(
    items: Iterable[OrderItem], delivery_type: str, delivery_fee: Decimal
) -> PriceBreakdown:
    """Price an order.

    subtotal = sum(amount); tax = subtotal * TAX_RATE;
    total = subtotal + tax + fee (fee forced to 0 for pickup);
    deposit = total * DEPOSIT_RATE regardless of payment type.
    """
    subtotal = compute_subtotal(items)
    fee = ZERO if delivery_type == DeliveryType.PICKUP.value else delivery_fee
    tax_amount = subtotal * TAX_RATE
    total = subtotal + tax_amount + fee
    return PriceBreakdown(
        subtotal=subtotal,
        tax_amount=tax_amount,
        delivery_fee=fee,
        total=total,
        deposit_amount=total * DEPOSIT_RATE,
    )
