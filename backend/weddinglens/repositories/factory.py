# backend/weddinglens/repositories/factory.py
"""
Repository Factory for WeddingLens

Provides centralized creation of repository instances so services never
construct data access objects by hand.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session


# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .catalog_repository import (
        PackageRepository,
        PhotographerRepository,
        ServiceCategoryRepository,
        ServiceRepository,
        TestimonialRepository,
    )
    from .earnings_repository import EarningsRepository
    from .webhook_event_repository import WebhookEventRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_photographer_repository(db: Session) -> "PhotographerRepository":
        from .catalog_repository import PhotographerRepository

        return PhotographerRepository(db)

    @staticmethod
    def create_service_category_repository(db: Session) -> "ServiceCategoryRepository":
        from .catalog_repository import ServiceCategoryRepository

        return ServiceCategoryRepository(db)

    @staticmethod
    def create_service_repository(db: Session) -> "ServiceRepository":
        from .catalog_repository import ServiceRepository

        return ServiceRepository(db)

    @staticmethod
    def create_package_repository(db: Session) -> "PackageRepository":
        from .catalog_repository import PackageRepository

        return PackageRepository(db)

    @staticmethod
    def create_testimonial_repository(db: Session) -> "TestimonialRepository":
        from .catalog_repository import TestimonialRepository

        return TestimonialRepository(db)

    @staticmethod
    def create_earnings_repository(db: Session) -> "EarningsRepository":
        """Create repository for the earnings ledger."""
        from .earnings_repository import EarningsRepository

        return EarningsRepository(db)

    @staticmethod
    def create_webhook_event_repository(db: Session) -> "WebhookEventRepository":
        from .webhook_event_repository import WebhookEventRepository

        return WebhookEventRepository(db)
