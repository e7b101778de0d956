"""Booking request builders."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from weddinglens.models.booking import EventType
from weddinglens.schemas.booking import BookingCreate

EVENT_DATE = date(2025, 12, 1)
PACKAGE_1_PRICE = Decimal("1999.99")


def booking_request(
    photographer_id: int = 1,
    event_date: date = EVENT_DATE,
    total_amount: Decimal = PACKAGE_1_PRICE,
    package_id: Optional[int] = 1,
    services: Optional[Dict[int, Any]] = None,
    event_type: EventType = EventType.WEDDING,
    location: str = "Udaipur",
) -> BookingCreate:
    return BookingCreate(
        photographer_id=photographer_id,
        event_date=event_date,
        event_type=event_type,
        location=location,
        package_id=package_id,
        services=services or {},
        total_amount=total_amount,
    )


def booking_payload(**overrides: Any) -> Dict[str, Any]:
    """JSON body for POST /api/v1/bookings."""
    payload: Dict[str, Any] = {
        "photographer_id": 1,
        "event_date": EVENT_DATE.isoformat(),
        "event_type": "wedding",
        "location": "Udaipur",
        "package_id": 1,
        "services": {},
        "total_amount": "1999.99",
    }
    payload.update(overrides)
    return payload
