# backend/weddinglens/routes/v1/availability.py
"""
Photographer availability routes - API v1

Endpoints:
    GET /              → Is the photographer free on a date? (public)
    GET /booked-dates  → Taken dates within a range, for calendars (public)
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.services import get_availability_service
from ...core.exceptions import DomainException
from ...schemas.booking import AvailabilityResponse, BookedDatesResponse
from ...services.availability_service import AvailabilityService, to_event_date

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


@router.get("", response_model=AvailabilityResponse)
async def check_availability(
    photographer_id: int = Query(..., gt=0),
    event_date: str = Query(..., alias="date", description="ISO date; time is ignored"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    try:
        day = to_event_date(event_date)
        available = await asyncio.to_thread(
            availability_service.is_available, photographer_id, day
        )
    except DomainException as e:
        raise e.to_http_exception()
    return AvailabilityResponse(photographer_id=photographer_id, date=day, available=available)


@router.get("/booked-dates", response_model=BookedDatesResponse)
async def get_booked_dates(
    photographer_id: int = Query(..., gt=0),
    start: str = Query(...),
    end: str = Query(...),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> BookedDatesResponse:
    try:
        start_day = to_event_date(start)
        end_day = to_event_date(end)
        booked = await asyncio.to_thread(
            availability_service.get_booked_dates, photographer_id, start_day, end_day
        )
    except DomainException as e:
        raise e.to_http_exception()
    return BookedDatesResponse(
        photographer_id=photographer_id, start=start_day, end=end_day, booked_dates=booked
    )


__all__ = ["router"]
