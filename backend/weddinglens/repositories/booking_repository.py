# backend/weddinglens/repositories/booking_repository.py
"""
Booking Repository for WeddingLens

Data access for bookings, including the slot queries availability is
decided from.
"""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import Booking, BookingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def get_for_update(self, booking_id: int) -> Optional[Booking]:
        """Fetch a booking row-locked for the rest of the transaction (no-op on sqlite)."""
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.id == booking_id)
                .with_for_update(of=Booking)
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock booking: {str(e)}")

    def has_active_booking_on(self, photographer_id: int, event_date: date) -> bool:
        """True when a non-cancelled booking holds the photographer on ``event_date``."""
        query = self.db.query(Booking.id).filter(
            Booking.photographer_id == photographer_id,
            Booking.event_date == event_date,
            Booking.status != BookingStatus.CANCELLED.value,
        )
        return self._execute_scalar(query.limit(1)) is not None

    def get_booked_dates(self, photographer_id: int, start: date, end: date) -> List[date]:
        """Distinct dates in [start, end] with an active booking for the photographer."""
        try:
            rows = (
                self.db.query(Booking.event_date)
                .filter(
                    Booking.photographer_id == photographer_id,
                    Booking.event_date >= start,
                    Booking.event_date <= end,
                    Booking.status != BookingStatus.CANCELLED.value,
                )
                .distinct()
                .order_by(Booking.event_date)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading booked dates: {str(e)}")
            raise RepositoryException(f"Failed to load booked dates: {str(e)}")
        return [row[0] for row in rows]

    def get_user_bookings(self, user_id: int) -> List[Booking]:
        query = (
            self._build_query()
            .filter(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return self._execute_query(query)

    def _filter_bookings(self, query, status: Optional[str], photographer_id: Optional[int]):
        if status:
            query = query.filter(Booking.status == status)
        if photographer_id is not None:
            query = query.filter(Booking.photographer_id == photographer_id)
        return query

    def list_bookings(
        self,
        *,
        status: Optional[str] = None,
        photographer_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        query = self._filter_bookings(self._build_query(), status, photographer_id)
        query = query.order_by(Booking.id.desc()).offset(skip).limit(limit)
        return self._execute_query(query)

    def count_bookings(
        self, *, status: Optional[str] = None, photographer_id: Optional[int] = None
    ) -> int:
        try:
            return self._filter_bookings(self.db.query(Booking), status, photographer_id).count()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting bookings: {str(e)}")
            raise RepositoryException(f"Failed to count bookings: {str(e)}")
