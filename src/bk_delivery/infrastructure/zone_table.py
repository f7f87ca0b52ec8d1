"""Static delivery zone table for the Montreal/Laval area.

Zones are keyed by the forward sortation area (first three characters of
the postal code). Fees and minimums are in CAD.
"""

from decimal import Decimal

from src.bk_delivery.domain.models import DeliveryZone, FeeResolution, MinimumCheck

_ZERO = Decimal("0")

DELIVERY_ZONES: tuple[DeliveryZone, ...] = (
    DeliveryZone(
        name="Zone 1",
        postal_prefixes=("H7X", "H7Y"),
        delivery_fee=Decimal("15.00"),
        minimum_order=Decimal("50.00"),
    ),
    DeliveryZone(
        name="Zone 2",
        postal_prefixes=("H7R", "H7P", "H7T", "H7W", "H7V"),
        delivery_fee=Decimal("25.00"),
        minimum_order=Decimal("100.00"),
    ),
    DeliveryZone(
        name="Zone 3",
        postal_prefixes=("H7L", "H7M", "H7S", "H7G", "H7N", "J7P", "J7G"),
        delivery_fee=Decimal("30.00"),
        minimum_order=Decimal("125.00"),
    ),
    DeliveryZone(
        name="Zone 4",
        postal_prefixes=(
            "H8Z", "H8Y", "H9B", "H4S", "H4Y", "H9P", "H8T", "H8S", "H4T",
            "H4M", "H4R", "H4K", "H4J", "H4L", "J7A", "J7E", "J7H", "J7R",
        ),
        delivery_fee=Decimal("30.00"),
        minimum_order=Decimal("200.00"),
    ),
    DeliveryZone(
        name="Zone 5",
        postal_prefixes=(
            "H2L", "H2J", "H2T", "H2W", "H2X", "H2Y", "H2K", "H2H", "H2Z",
            "J7C", "J7B", "J6Z",
        ),
        delivery_fee=Decimal("40.00"),
        minimum_order=Decimal("200.00"),
    ),
    DeliveryZone(
        name="Hors Zone",
        postal_prefixes=(
            "H9K", "H9J", "H9W", "H3M", "H4N", "H3L", "H2C", "H2B", "H2M",
            "H1Z", "H2N", "H2P", "H2R", "H2E", "H2A", "H3P", "H3N", "H2S",
            "H2G", "H1Y", "H1W", "H3R", "H3S", "H2V", "H3T", "H3W", "H4P",
            "H3X", "H3Y", "H3V", "H3H", "H3G", "H3A", "H3B", "H3C", "H3J",
            "H3K", "H3Z", "H4C", "H4E", "H4G", "H4H", "H8N", "H8P", "H8R",
            "H4A", "H4B", "H4X", "H4V", "H4W", "H7H", "H7B", "H7E", "H7C",
        ),
        delivery_fee=Decimal("40.00"),
        minimum_order=Decimal("400.00"),
    ),
)


def normalize_postal_code(postal_code: str) -> str:
    """'h7x 1a1' -> 'H7X'."""
    return "".join(postal_code.split()).upper()[:3]


class StaticZoneResolver:
    """DeliveryZoneResolverProtocol over an in-memory zone table."""

    def __init__(self, zones: tuple[DeliveryZone, ...] = DELIVERY_ZONES) -> None:
        self._zones = zones
        self._by_prefix = {
            prefix: zone for zone in zones for prefix in zone.postal_prefixes
        }

    def find_zone(self, postal_code: str) -> DeliveryZone | None:
        return self._by_prefix.get(normalize_postal_code(postal_code))

    async def resolve_fee(self, postal_code: str) -> FeeResolution:
        zone = self.find_zone(postal_code)
        if zone is None:
            return FeeResolution(
                is_valid=False, fee=_ZERO, minimum_order=_ZERO, zone_name="Zone not found"
            )
        return FeeResolution(
            is_valid=True,
            fee=zone.delivery_fee,
            minimum_order=zone.minimum_order,
            zone_name=zone.name,
        )

    async def validate_minimum(self, postal_code: str, subtotal: Decimal) -> MinimumCheck:
        zone = self.find_zone(postal_code)
        if zone is None:
            return MinimumCheck(
                is_valid=False, shortfall=_ZERO, minimum_order=_ZERO, postal_code=postal_code
            )
        return MinimumCheck(
            is_valid=subtotal >= zone.minimum_order,
            shortfall=max(_ZERO, zone.minimum_order - subtotal),
            minimum_order=zone.minimum_order,
            postal_code=postal_code,
        )

    async def list_zones(self) -> list[DeliveryZone]:
        return list(self._zones)
