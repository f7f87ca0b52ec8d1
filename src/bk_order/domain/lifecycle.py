"""Order lifecycle: fulfillment status and payment flags.

Two independent axes:

Fulfillment status
    pending → confirmed → in_production → ready → completed
    cancelled / delivered reachable from any non-terminal state.
    completed, cancelled and delivered are terminal.

    ``can_transition`` encodes that table. It is only enforced when strict
    mode is on; in permissive mode any status may be written (legacy
    behaviour).

Payment flags
    deposit_paid and balance_paid only move false → true, the first flip
    stamps the matching *_paid_at, and balance_paid requires deposit_paid.
    These rules hold in both modes.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from src.bk_common.enums import OrderStatus, PaymentStatus, PaymentType
from src.bk_common.errors import (
    BalanceBeforeDepositError,
    InvalidStatusTransitionError,
    PaymentFlagRevertError,
)

if TYPE_CHECKING:
    from src.bk_order.domain.models import Order

FULFILLMENT_SEQUENCE: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.IN_PRODUCTION,
    OrderStatus.READY,
    OrderStatus.COMPLETED,
)
EXIT_STATES = frozenset({OrderStatus.CANCELLED, OrderStatus.DELIVERED})
TERMINAL_STATES = frozenset({OrderStatus.COMPLETED, *EXIT_STATES})


def is_terminal(status: str) -> bool:
    return OrderStatus(status) in TERMINAL_STATES


def can_transition(current: str, target: str) -> bool:
    """Strict transition table. Re-writing the current status is always allowed."""
    src, dst = OrderStatus(current), OrderStatus(target)
    if src == dst:
        return True
    if is_terminal(current):
        return False
    if dst in EXIT_STATES:
        return True
    return FULFILLMENT_SEQUENCE.index(dst) > FULFILLMENT_SEQUENCE.index(src)


def apply_status(order: "Order", target: str, strict: bool) -> None:
    if strict and not can_transition(order.status, target):
        raise InvalidStatusTransitionError(order.status, target)
    order.status = OrderStatus(target).value


def derive_payment_status(deposit_paid: bool, balance_paid: bool) -> PaymentStatus:
    if deposit_paid and balance_paid:
        return PaymentStatus.PAID
    if deposit_paid:
        return PaymentStatus.DEPOSIT_PAID
    return PaymentStatus.UNPAID


def initial_payment_flags(payment_type: str, deposit_paid_intent: bool) -> tuple[bool, bool]:
    """(deposit_paid, balance_paid) for a new order.

    full + paid    -> both paid (the whole amount was charged)
    deposit + paid -> deposit only
    invoice        -> nothing paid, whatever the intent
    anything else  -> nothing paid
    """
    if not deposit_paid_intent:
        return False, False
    if payment_type == PaymentType.FULL.value:
        return True, True
    if payment_type == PaymentType.DEPOSIT.value:
        return True, False
    return False, False


def apply_payment_flags(
    order: "Order",
    deposit_paid: bool | None,
    balance_paid: bool | None,
    now: datetime,
) -> None:
    """Apply a payment patch; None means "not in the patch".

    Deposit is applied before balance so a single patch may settle both.
    Raises PaymentFlagRevertError on true → false, BalanceBeforeDepositError
    when the balance would be paid with the deposit still open.
    """
    if deposit_paid is not None:
        if not deposit_paid and order.deposit_paid:
            raise PaymentFlagRevertError("deposit_paid")
        if deposit_paid and not order.deposit_paid:
            order.deposit_paid = True
            if order.deposit_paid_at is None:
                order.deposit_paid_at = now

    if balance_paid is not None:
        if not balance_paid and order.balance_paid:
            raise PaymentFlagRevertError("balance_paid")
        if balance_paid and not order.balance_paid:
            if not order.deposit_paid:
                raise BalanceBeforeDepositError()
            order.balance_paid = True
            if order.balance_paid_at is None:
                order.balance_paid_at = now

    order.refresh_payment_status()
