"""Unified error codes and custom exceptions.

Every error belongs to one category (``kind``) that callers can rely on:
ValidationError, UnauthorizedError, ForbiddenError, NotFoundError,
ConflictError, ExternalServiceError, InternalError.

Error code ranges:
  1xxx: Auth/User
  2xxx: Delivery zones
  4xxx: Order
  9xxx: System
"""

from decimal import Decimal
from typing import Any


class AppError(Exception):
    """Base application error."""

    kind = "InternalError"

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details or {}
        super().__init__(message)


# --- Categories ---

class ValidationError(AppError):
    kind = "ValidationError"

    def __init__(self, code: int, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code, message, 422, details)


class UnauthorizedError(AppError):
    kind = "Unauthorized"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 401)


class ForbiddenError(AppError):
    kind = "Forbidden"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 403)


class NotFoundError(AppError):
    kind = "NotFound"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class ConflictError(AppError):
    kind = "Conflict"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class ExternalServiceError(AppError):
    kind = "ExternalServiceFailure"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 502)


# --- 1xxx: Auth/User ---

class InvalidTokenError(UnauthorizedError):
    def __init__(self) -> None:
        super().__init__(1001, "Authentication required: token is missing, invalid or expired")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1002, f"User not found: {user_id}")


class InsufficientRoleError(ForbiddenError):
    def __init__(self, action: str) -> None:
        super().__init__(1003, f"Insufficient permissions to {action}")


class SelfDeletionError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(1004, "Cannot delete your own account")


class RoleEscalationError(ForbiddenError):
    def __init__(self, role: str) -> None:
        super().__init__(
            1005, f"Cannot assign role {role}: equal to or higher than your own"
        )


class InvalidRoleError(ValidationError):
    def __init__(self, role: str) -> None:
        super().__init__(1006, f"Unknown role: {role}")


class AccountDisabledError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__(1007, "Account is disabled")


# --- 2xxx: Delivery zones ---

class PostalCodeNotServicedError(ValidationError):
    def __init__(self, postal_code: str) -> None:
        super().__init__(
            2001,
            f"Postal code {postal_code} is outside the delivery zones",
            {"postal_code": postal_code},
        )


class MinimumOrderNotMetError(ValidationError):
    def __init__(self, postal_code: str, minimum_order: Decimal, shortfall: Decimal) -> None:
        self.shortfall = shortfall
        self.minimum_order = minimum_order
        super().__init__(
            2002,
            f"Minimum order not met for {postal_code}: minimum {minimum_order:.2f}$, "
            f"missing {shortfall:.2f}$",
            {
                "postal_code": postal_code,
                "minimum_order": str(minimum_order),
                "shortfall": str(shortfall),
            },
        )


class DeliveryZoneUnavailableError(ExternalServiceError):
    def __init__(self, postal_code: str) -> None:
        super().__init__(2003, f"Delivery zone lookup failed for {postal_code}")


# --- 4xxx: Order ---

class EmptyOrderItemsError(ValidationError):
    def __init__(self) -> None:
        super().__init__(4001, "At least one item is required")


class InvalidPayloadError(ValidationError):
    def __init__(self, message: str, errors: list[Any] | None = None) -> None:
        super().__init__(4002, message, {"errors": errors or []})


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Order not found: {order_id}")


class InvalidStatusTransitionError(ValidationError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            4005,
            f"Order status cannot change from {current} to {target}",
            {"current": current, "target": target},
        )


class PaymentFlagRevertError(ValidationError):
    def __init__(self, flag: str) -> None:
        super().__init__(4006, f"{flag} is already recorded and cannot be reverted")


class BalanceBeforeDepositError(ValidationError):
    def __init__(self) -> None:
        super().__init__(4007, "Balance cannot be marked paid before the deposit")


class InvalidDateRangeError(ValidationError):
    def __init__(self) -> None:
        super().__init__(4008, "from_date must not be later than to_date")


class StaleOrderError(ConflictError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4009, f"Order {order_id} was modified concurrently, reload and retry")


class IncompleteReceiptError(ValidationError):
    def __init__(self, payment_type: str, missing: list[str]) -> None:
        super().__init__(
            4010,
            f"Cannot build a {payment_type} receipt without: {', '.join(missing)}",
            {"missing": missing},
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
