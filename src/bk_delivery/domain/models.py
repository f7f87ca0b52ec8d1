"""Delivery zone domain models: pure dataclasses."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class DeliveryZone:
    name: str
    postal_prefixes: tuple[str, ...]  # first three characters, e.g. "H7X"
    delivery_fee: Decimal
    minimum_order: Decimal


@dataclass(frozen=True)
class FeeResolution:
    is_valid: bool
    fee: Decimal
    minimum_order: Decimal
    zone_name: str


@dataclass(frozen=True)
class MinimumCheck:
    is_valid: bool
    shortfall: Decimal
    minimum_order: Decimal
    postal_code: str
