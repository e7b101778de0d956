# backend/weddinglens/schemas/__init__.py
"""Pydantic schemas for WeddingLens."""

from .booking import (
    AvailabilityResponse,
    BookedDatesResponse,
    BookingCancel,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
)
from .catalog import (
    PackageResponse,
    PhotographerProfileResponse,
    PhotographerResponse,
    PortfolioItemResponse,
    ServiceCategoryResponse,
    ServiceResponse,
    TestimonialResponse,
)
from .earnings import (
    EarningsDashboardResponse,
    EarningsAnalyticsResponse,
    EarningsRecordResponse,
    EarningsSummaryResponse,
    MonthlyEarnings,
)
from .payment_schemas import PaymentIntentCreate, PaymentIntentResponse, WebhookResponse
from .pricing import QuoteLineResponse, QuoteRequest, QuoteResponse

__all__ = [
    "AvailabilityResponse",
    "BookedDatesResponse",
    "BookingCancel",
    "BookingCreate",
    "BookingListResponse",
    "BookingResponse",
    "EarningsAnalyticsResponse",
    "EarningsDashboardResponse",
    "EarningsRecordResponse",
    "EarningsSummaryResponse",
    "MonthlyEarnings",
    "PackageResponse",
    "PaymentIntentCreate",
    "PaymentIntentResponse",
    "PhotographerProfileResponse",
    "PhotographerResponse",
    "PortfolioItemResponse",
    "QuoteLineResponse",
    "QuoteRequest",
    "QuoteResponse",
    "ServiceCategoryResponse",
    "ServiceResponse",
    "TestimonialResponse",
    "WebhookResponse",
]
