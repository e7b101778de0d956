# backend/weddinglens/schemas/booking.py
"""
Booking schemas for WeddingLens.

The service selection is a typed mapping of catalog service id to either
a boolean (selected / not selected) or a quantity. It is normalized to
``{service_id: quantity}`` with unselected entries dropped.
"""

from datetime import date, datetime
from decimal import Decimal
import re
from typing import Dict, List, Optional, Union

from pydantic import Field, StrictBool, field_validator

from ..core.constants import (
    MAX_CANCELLATION_REASON_LENGTH,
    MAX_LOCATION_LENGTH,
    MAX_SERVICE_QUANTITY,
    MIN_LOCATION_LENGTH,
)
from ..models.booking import BookingStatus, EventType, PaymentStatus
from ._strict_base import StrictModel, StrictRequestModel

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}")

ServiceSelection = Dict[int, Union[StrictBool, int]]


def normalize_service_selection(raw: Optional[ServiceSelection]) -> Dict[int, int]:
    """Turn ``{id: bool | qty}`` into ``{id: qty}``, dropping unselected services."""
    normalized: Dict[int, int] = {}
    for service_id, value in (raw or {}).items():
        quantity = (1 if value else 0) if isinstance(value, bool) else int(value)
        if quantity < 0 or quantity > MAX_SERVICE_QUANTITY:
            raise ValueError(
                f"Quantity for service {service_id} must be between 0 and {MAX_SERVICE_QUANTITY}"
            )
        if quantity:
            normalized[int(service_id)] = quantity
    return normalized


def parse_service_selection(value: object) -> Dict[int, int]:
    """Validate a raw JSON ``services`` object and normalize it."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("services must be an object mapping service id to true/false or a quantity")
    parsed: ServiceSelection = {}
    for key, item in value.items():
        try:
            service_id = int(key)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid service id: {key!r}")
        if not isinstance(item, (bool, int)):
            raise ValueError(f"Service {key} must be true/false or an integer quantity")
        parsed[service_id] = item
    return normalize_service_selection(parsed)


class BookingCreate(StrictRequestModel):
    """Create a booking for one photographer on one event date."""

    photographer_id: int = Field(..., gt=0, description="Photographer to book")
    event_date: date = Field(..., description="Event date; any time component is ignored")
    event_type: EventType = Field(..., description="Which wedding event is being covered")
    location: str = Field(..., description="Venue or city")
    package_id: Optional[int] = Field(None, gt=0, description="Selected package, if any")
    services: Dict[int, int] = Field(
        default_factory=dict,
        description="Selected services: {service_id: true|false|quantity}",
    )
    total_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)

    @field_validator("event_date", mode="before")
    @classmethod
    def _strip_time(cls, value: object) -> object:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and DATE_ONLY_REGEX.match(value.strip()):
            return value.strip()[:10]
        return value

    @field_validator("location")
    @classmethod
    def _validate_location(cls, value: str) -> str:
        cleaned = value.strip()
        if len(cleaned) < MIN_LOCATION_LENGTH:
            raise ValueError(f"location must be at least {MIN_LOCATION_LENGTH} characters")
        if len(cleaned) > MAX_LOCATION_LENGTH:
            raise ValueError(f"location must be at most {MAX_LOCATION_LENGTH} characters")
        return cleaned

    @field_validator("services", mode="before")
    @classmethod
    def _normalize_services(cls, value: object) -> object:
        return parse_service_selection(value)


class BookingCancel(StrictRequestModel):
    reason: Optional[str] = Field(None, max_length=MAX_CANCELLATION_REASON_LENGTH)


class BookingResponse(StrictModel):
    id: int
    user_id: int
    photographer_id: int
    package_id: Optional[int] = None
    event_date: date
    event_type: str
    location: str
    services: Dict[int, int] = Field(default_factory=dict)
    total_amount: Decimal
    status: BookingStatus
    payment_status: PaymentStatus
    payment_intent_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_booking(cls, booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            photographer_id=booking.photographer_id,
            package_id=booking.package_id,
            event_date=booking.event_date,
            event_type=booking.event_type,
            location=booking.location,
            services=booking.selected_services,
            total_amount=booking.total_amount,
            status=booking.status,
            payment_status=booking.payment_status,
            payment_intent_id=booking.payment_intent_id,
            cancellation_reason=booking.cancellation_reason,
            created_at=booking.created_at,
            confirmed_at=booking.confirmed_at,
            cancelled_at=booking.cancelled_at,
            completed_at=booking.completed_at,
        )


class BookingListResponse(StrictModel):
    items: List[BookingResponse]
    total: int


class AvailabilityResponse(StrictModel):
    photographer_id: int
    date: date
    available: bool


class BookedDatesResponse(StrictModel):
    photographer_id: int
    start: date
    end: date
    booked_dates: List[date]
