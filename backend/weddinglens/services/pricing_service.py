# backend/weddinglens/services/pricing_service.py
"""
Pricing for WeddingLens bookings.

Price is a pure function of the selection: a chosen package costs the
package price (its services are included); otherwise each selected service
costs its catalog price times quantity. The same function backs the quote
endpoint and the booking-creation check.

Money is Decimal in major units everywhere; conversion to gateway minor
units happens only through ``to_minor_units``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Dict, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import MONEY_QUANTUM
from ..core.exceptions import ValidationException
from ..models.catalog import Package, Service
from .base import BaseService
from .catalog_service import CatalogService

logger = logging.getLogger(__name__)


def quantize_money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to integer minor units, rounding half up."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def split_commission(amount: Decimal, commission_rate: Decimal) -> Tuple[Decimal, Decimal]:
    """
    Split ``amount`` into (platform, photographer) shares.

    The platform share is ``amount * rate`` rounded half up to 0.01; the
    photographer gets the exact remainder, so the two always sum to ``amount``.
    """
    total = quantize_money(amount)
    platform = quantize_money(total * Decimal(commission_rate))
    return platform, total - platform


@dataclass
class QuoteLine:
    service_id: int
    name: str
    unit_price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return quantize_money(self.unit_price * self.quantity)


@dataclass
class PriceQuote:
    total: Decimal
    package_id: Optional[int] = None
    package_name: Optional[str] = None
    lines: List[QuoteLine] = field(default_factory=list)


def compute_quote(
    package: Optional[Package],
    services: Mapping[int, Service],
    selection: Mapping[int, int],
) -> PriceQuote:
    """Price a selection against already-loaded catalog rows."""
    if package is not None:
        return PriceQuote(
            total=quantize_money(package.price),
            package_id=package.id,
            package_name=package.name,
        )

    lines = [
        QuoteLine(
            service_id=service_id,
            name=services[service_id].name,
            unit_price=Decimal(services[service_id].price),
            quantity=quantity,
        )
        for service_id, quantity in sorted(selection.items())
        if quantity > 0
    ]
    total = sum((line.subtotal for line in lines), Decimal("0.00"))
    return PriceQuote(total=quantize_money(total), lines=lines)


class PricingService(BaseService):
    """Server-side price computation against the catalog."""

    def __init__(self, db: Session, catalog_service: Optional[CatalogService] = None):
        super().__init__(db)
        self.catalog_service = catalog_service or CatalogService(db)

    @BaseService.measure_operation("quote")
    def quote(self, package_id: Optional[int], services: Optional[Mapping[int, int]]) -> PriceQuote:
        selection: Dict[int, int] = dict(services or {})
        package = self.catalog_service.get_package(package_id) if package_id is not None else None
        wanted = [service_id for service_id, qty in selection.items() if qty > 0]
        catalog_services = self.catalog_service.get_services(wanted) if wanted else {}
        return compute_quote(package, catalog_services, selection)

    def check_amount(
        self,
        total_amount: Decimal,
        package_id: Optional[int],
        services: Optional[Mapping[int, int]],
    ) -> PriceQuote:
        """
        Compare a caller-supplied total with the server quote.

        A mismatch is always logged; it is rejected only when
        ``settings.enforce_server_pricing`` is on.
        """
        quote = self.quote(package_id, services)
        supplied = quantize_money(total_amount)
        if supplied != quote.total:
            self.logger.warning(
                "Booking total differs from catalog quote",
                extra={
                    "supplied_total": str(supplied),
                    "quoted_total": str(quote.total),
                    "package_id": package_id,
                },
            )
            if settings.enforce_server_pricing:
                raise ValidationException(
                    "Total amount does not match the selected package or services",
                    code="PRICE_MISMATCH",
                    details={"supplied": str(supplied), "expected": str(quote.total)},
                )
        return quote
