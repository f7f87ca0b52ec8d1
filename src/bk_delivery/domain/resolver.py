# src/bk_delivery/domain/resolver.py
"""DeliveryZoneResolver Protocol — contract consumed by the order service.

Implementations must be deterministic and side-effect free. An unknown postal
code is reported through ``is_valid=False``, never by raising; raising means
the lookup itself failed.
"""
from decimal import Decimal
from typing import Protocol

from src.bk_delivery.domain.models import DeliveryZone, FeeResolution, MinimumCheck


class DeliveryZoneResolverProtocol(Protocol):
    async def resolve_fee(self, postal_code: str) -> FeeResolution: ...

    async def validate_minimum(self, postal_code: str, subtotal: Decimal) -> MinimumCheck: ...

    async def list_zones(self) -> list[DeliveryZone]: ...
