# backend/weddinglens/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each factory builds a service around the request's database session. The
payment gateway client is process-wide and overridable in tests.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.catalog_service import CatalogService
from ...services.earnings_service import EarningsService
from ...services.payment_webhook_service import PaymentWebhookService
from ...services.pricing_service import PricingService
from ...services.stripe_service import PaymentGateway, StripeGateway, StripeService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _stripe_gateway_singleton() -> StripeGateway:
    return StripeGateway()


def get_payment_gateway() -> PaymentGateway:
    """Get the payment gateway client."""
    return _stripe_gateway_singleton()


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_pricing_service(
    db: Session = Depends(get_db),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> PricingService:
    return PricingService(db, catalog_service)


def get_availability_service(
    db: Session = Depends(get_db),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> AvailabilityService:
    return AvailabilityService(db, catalog_service)


def get_booking_service(
    db: Session = Depends(get_db),
    catalog_service: CatalogService = Depends(get_catalog_service),
    pricing_service: PricingService = Depends(get_pricing_service),
) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session
        catalog_service: Catalog lookups for photographer/package/service ids
        pricing_service: Server-side price check

    Returns:
        BookingService instance
    """
    return BookingService(db, catalog_service, pricing_service)


def get_earnings_service(db: Session = Depends(get_db)) -> EarningsService:
    return EarningsService(db)


def get_stripe_service(
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    booking_service: BookingService = Depends(get_booking_service),
) -> StripeService:
    return StripeService(db, gateway, booking_service)


def get_payment_webhook_service(
    db: Session = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service),
    earnings_service: EarningsService = Depends(get_earnings_service),
) -> PaymentWebhookService:
    return PaymentWebhookService(db, booking_service, earnings_service)
