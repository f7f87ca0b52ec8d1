"""Order receipts: what the customer is told after an order is placed.

The template follows the payment type:
  full    -> full_payment_receipt (requires payment_id)
  deposit -> deposit_receipt (requires payment_id and a deposit amount)
  invoice -> invoice_order_confirmation (nothing extra)
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

from src.bk_common.enums import PaymentType
from src.bk_common.errors import IncompleteReceiptError
from src.bk_common.money import money_to_display
from src.bk_order.domain.models import Order

RECEIPT_TEMPLATES = {
    PaymentType.FULL.value: "full_payment_receipt",
    PaymentType.DEPOSIT.value: "deposit_receipt",
    PaymentType.INVOICE.value: "invoice_order_confirmation",
}


@dataclass(frozen=True)
class ReceiptLine:
    product_name: str
    quantity: int
    amount: Decimal


@dataclass(frozen=True)
class Receipt:
    payment_type: str
    email: str
    name: str
    order_number: str
    subtotal: Decimal
    tax_amount: Decimal
    delivery_fee: Decimal
    total: Decimal
    lines: tuple[ReceiptLine, ...] = field(default_factory=tuple)
    deposit_amount: Decimal | None = None
    payment_id: str | None = None
    invoice_url: str | None = None

    @property
    def template(self) -> str:
        return RECEIPT_TEMPLATES[self.payment_type]

    @property
    def balance_due(self) -> Decimal | None:
        if self.deposit_amount is None:
            return None
        return self.total - self.deposit_amount

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the mail relay. Amounts go out as exact strings plus display text."""
        balance_due = self.balance_due
        return {
            "template": self.template,
            "to": self.email,
            "name": self.name,
            "order_number": self.order_number,
            "items": [
                {"product_name": line.product_name, "quantity": line.quantity, "amount": str(line.amount)}
                for line in self.lines
            ],
            "subtotal": str(self.subtotal),
            "tax_amount": str(self.tax_amount),
            "delivery_fee": str(self.delivery_fee),
            "total": str(self.total),
            "total_display": money_to_display(self.total),
            "deposit_amount": str(self.deposit_amount) if self.deposit_amount is not None else None,
            "balance_due": str(balance_due) if balance_due is not None else None,
            "payment_id": self.payment_id,
            "invoice_url": self.invoice_url,
        }


def check_receipt_complete(receipt: Receipt) -> None:
    missing: list[str] = []
    if receipt.payment_type in (PaymentType.FULL.value, PaymentType.DEPOSIT.value):
        if not receipt.payment_id:
            missing.append("payment_id")
    if receipt.payment_type == PaymentType.DEPOSIT.value and not receipt.deposit_amount:
        missing.append("deposit_amount")
    if missing:
        raise IncompleteReceiptError(receipt.payment_type, missing)


def build_receipt(order: Order) -> Receipt:
    """Receipt for a persisted order. Raises IncompleteReceiptError if it cannot be sent."""
    is_deposit = order.payment_type == PaymentType.DEPOSIT.value
    receipt = Receipt(
        payment_type=order.payment_type,
        email=order.client_info.email,
        name=order.client_info.full_name,
        order_number=order.order_number,
        subtotal=order.subtotal,
        tax_amount=order.tax_amount,
        delivery_fee=order.delivery_fee,
        total=order.total,
        lines=tuple(
            ReceiptLine(i.product_name, i.quantity, i.amount) for i in order.items
        ),
        deposit_amount=order.deposit_amount if is_deposit else None,
        payment_id=order.payment_id,
        invoice_url=order.invoice_url,
    )
    check_receipt_complete(receipt)
    return receipt


class ReceiptNotifierProtocol(Protocol):
    async def send(self, receipt: Receipt) -> None: ...
