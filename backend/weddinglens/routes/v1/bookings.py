# backend/weddinglens/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST /                       - Create a booking for the authenticated user
    GET /                        - All bookings, optionally by status or photographer
    GET /me                      - The authenticated user's bookings
    GET /user/{user_id}          - Bookings of a given user
    GET /{booking_id}            - Booking details
    POST /{booking_id}/cancel    - Cancel own booking
    POST /{booking_id}/complete  - Mark a confirmed booking as completed
"""

import asyncio
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from ...api.dependencies import get_booking_service, get_current_user_id
from ...core.exceptions import DomainException
from ...schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Date no longer available"}},
)
async def create_booking(
    booking_data: BookingCreate,
    user_id: int = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Create a pending booking; payment happens through /payments/intents."""
    try:
        booking = await asyncio.to_thread(booking_service.create_booking, user_id, booking_data)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    photographer_id: Optional[int] = Query(None, gt=0),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """All bookings, newest first. ``total`` counts every match, not just this page."""

    def _page():
        filters = {"status": status_filter, "photographer_id": photographer_id}
        return (
            booking_service.list_bookings(skip=skip, limit=limit, **filters),
            booking_service.count_bookings(**filters),
        )

    try:
        bookings, total = await asyncio.to_thread(_page)
    except DomainException as e:
        handle_domain_exception(e)
    items = [BookingResponse.from_booking(b) for b in bookings]
    return BookingListResponse(items=items, total=total)


@router.get("/me", response_model=BookingListResponse)
async def get_my_bookings(
    user_id: int = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    bookings = await asyncio.to_thread(booking_service.get_bookings_for_user, user_id)
    items = [BookingResponse.from_booking(b) for b in bookings]
    return BookingListResponse(items=items, total=len(items))


# ============================================================================
# SECTION 2: Routes with path parameters
# ============================================================================


@router.get("/user/{user_id}", response_model=BookingListResponse)
async def get_user_bookings(
    user_id: int = Path(..., gt=0),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """Bookings made by ``user_id``, newest first."""
    bookings = await asyncio.to_thread(booking_service.get_bookings_for_user, user_id)
    items = [BookingResponse.from_booking(b) for b in bookings]
    return BookingListResponse(items=items, total=len(items))


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def get_booking(
    booking_id: int = Path(..., gt=0),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.get_booking, booking_id)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def cancel_booking(
    booking_id: int = Path(..., gt=0),
    cancel_data: Optional[BookingCancel] = Body(None),
    user_id: int = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Cancel a booking."""
    try:
        booking = await asyncio.to_thread(
            lambda: booking_service.cancel_booking(
                booking_id,
                reason=cancel_data.reason if cancel_data else None,
                user_id=user_id,
            )
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/complete",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def complete_booking(
    booking_id: int = Path(..., gt=0),
    user_id: int = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Mark a confirmed booking as completed."""
    try:
        booking = await asyncio.to_thread(booking_service.complete_booking, booking_id)
        logger.info("Booking %s completed by user %s", booking_id, user_id)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


__all__ = ["router"]
