# backend/weddinglens/models/__init__.py
"""
Database models for the WeddingLens platform.

Importing this package registers every table on ``Base.metadata``.
"""

from .booking import Booking, BookingStatus, EventType, PaymentStatus
from .catalog import Package, Photographer, PortfolioItem, Service, ServiceCategory, Testimonial
from .earnings import EarningsRecord, EarningsStatus
from .webhook_event import WebhookEvent

__all__ = [
    "Booking",
    "BookingStatus",
    "EventType",
    "PaymentStatus",
    "Photographer",
    "ServiceCategory",
    "Service",
    "Package",
    "PortfolioItem",
    "Testimonial",
    "EarningsRecord",
    "EarningsStatus",
    "WebhookEvent",
]
