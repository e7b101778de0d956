# backend/weddinglens/services/availability_service.py
"""
Availability Service for WeddingLens

A photographer is available on a date unless a non-cancelled booking
already holds them on that calendar date. Availability is computed from
bookings on every call; nothing is stored.
"""

from datetime import date, datetime, timedelta
import logging
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationException
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .catalog_service import CatalogService

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]

MAX_CALENDAR_RANGE_DAYS = 366


def to_event_date(value: DateLike) -> date:
    """
    Normalize input to a calendar date. Time of day is discarded.

    Raises:
        ValidationException: If a string is not an ISO date or datetime
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        candidate = value.strip()
        try:
            if len(candidate) == 10:
                return date.fromisoformat(candidate)
            return datetime.fromisoformat(candidate.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise ValidationException(
        f"Invalid date: {value!r}", code="INVALID_DATE", details={"date": str(value)}
    )


class AvailabilityService(BaseService):
    """Decides whether a photographer can still be booked on a date."""

    def __init__(self, db: Session, catalog_service: Optional[CatalogService] = None):
        super().__init__(db)
        self.catalog_service = catalog_service or CatalogService(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("is_available")
    def is_available(self, photographer_id: int, event_date: DateLike) -> bool:
        """
        Check whether ``photographer_id`` has no active booking on ``event_date``.

        Raises:
            NotFoundException: If the photographer doesn't exist
            ValidationException: If the date cannot be parsed
        """
        day = to_event_date(event_date)
        self.catalog_service.get_photographer(photographer_id)
        return not self.booking_repository.has_active_booking_on(photographer_id, day)

    @BaseService.measure_operation("get_booked_dates")
    def get_booked_dates(
        self, photographer_id: int, start: DateLike, end: DateLike
    ) -> List[date]:
        """Dates in [start, end] on which the photographer is already taken."""
        start_day = to_event_date(start)
        end_day = to_event_date(end)
        if end_day < start_day:
            raise ValidationException("End date must not be before start date")
        if end_day - start_day > timedelta(days=MAX_CALENDAR_RANGE_DAYS):
            raise ValidationException(
                f"Date range cannot exceed {MAX_CALENDAR_RANGE_DAYS} days",
                details={"start": start_day.isoformat(), "end": end_day.isoformat()},
            )
        self.catalog_service.get_photographer(photographer_id)
        return self.booking_repository.get_booked_dates(photographer_id, start_day, end_day)
