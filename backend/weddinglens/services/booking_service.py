# backend/weddinglens/services/booking_service.py
"""
Booking Service for WeddingLens

Owns booking records and is their only writer. Every status change, from
routes, the payment coordinator or the webhook reconciler, goes through
``update_status`` / ``update_payment_status`` so the transition rules are
enforced in one place.

Creation closes the check-then-insert race: availability is re-checked
while holding the (photographer, date) slot lock, and the partial unique
index on active bookings turns any remaining collision into a conflict.
"""

from datetime import datetime, timezone
import logging
from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    BookingConflictException,
    BusinessRuleException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
    RepositoryException,
    ValidationException,
)
from ..core.slot_lock import slot_lock
from ..models.booking import (
    BOOKING_STATUS_TRANSITIONS,
    PAYMENT_STATUS_TRANSITIONS,
    Booking,
    BookingStatus,
    PaymentStatus,
)
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookingCreate
from .base import BaseService
from .catalog_service import CatalogService
from .pricing_service import PricingService

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationException(
            f"Invalid {enum_cls.__name__}: {value!r}",
            details={"allowed": [member.value for member in enum_cls]},
        )


class BookingService(BaseService):
    """Creates bookings and applies every status change to them."""

    def __init__(
        self,
        db: Session,
        catalog_service: Optional[CatalogService] = None,
        pricing_service: Optional[PricingService] = None,
    ):
        super().__init__(db)
        self.catalog_service = catalog_service or CatalogService(db)
        self.pricing_service = pricing_service or PricingService(db, self.catalog_service)
        self.repository = RepositoryFactory.create_booking_repository(db)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_booking")
    def create_booking(self, user_id: int, booking_data: BookingCreate) -> Booking:
        """
        Create a pending booking.

        Args:
            user_id: Customer making the booking (from the auth boundary)
            booking_data: Validated booking request

        Returns:
            The new booking in (pending, pending) with no payment intent

        Raises:
            ValidationException: Malformed input or (when enforced) a price mismatch
            NotFoundException: Unknown photographer, package or service
            BookingConflictException: The photographer is already booked that day
        """
        if not user_id or user_id <= 0:
            raise ValidationException("A valid user id is required", details={"user_id": user_id})

        photographer_id = booking_data.photographer_id
        event_date = booking_data.event_date

        self.catalog_service.get_photographer(photographer_id)
        self.pricing_service.check_amount(
            booking_data.total_amount, booking_data.package_id, booking_data.services
        )

        with slot_lock(photographer_id, event_date) as acquired:
            if not acquired:
                prometheus_metrics.inc_booking_created("conflict")
                raise BookingConflictException(
                    "Another booking for this date is in progress",
                    details=self._slot_details(photographer_id, event_date),
                )
            with self.transaction():
                if self.repository.has_active_booking_on(photographer_id, event_date):
                    prometheus_metrics.inc_booking_created("conflict")
                    raise BookingConflictException(
                        details=self._slot_details(photographer_id, event_date)
                    )
                try:
                    booking = self.repository.create(
                        user_id=user_id,
                        photographer_id=photographer_id,
                        package_id=booking_data.package_id,
                        event_date=event_date,
                        event_type=booking_data.event_type.value,
                        location=booking_data.location,
                        services={str(k): v for k, v in booking_data.services.items()},
                        total_amount=booking_data.total_amount,
                        status=BookingStatus.PENDING.value,
                        payment_status=PaymentStatus.PENDING.value,
                        payment_intent_id=None,
                    )
                except RepositoryException as exc:
                    if isinstance(exc.__cause__, IntegrityError):
                        prometheus_metrics.inc_booking_created("conflict")
                        raise BookingConflictException(
                            details=self._slot_details(photographer_id, event_date)
                        ) from exc
                    raise

        prometheus_metrics.inc_booking_created("created")
        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            photographer_id=photographer_id,
            event_date=event_date.isoformat(),
        )
        return booking

    @staticmethod
    def _slot_details(photographer_id: int, event_date) -> dict:
        return {"photographer_id": photographer_id, "event_date": event_date.isoformat()}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if not booking:
            raise NotFoundException(
                f"Booking {booking_id} not found", details={"booking_id": booking_id}
            )
        return booking

    def get_bookings_for_user(self, user_id: int) -> List[Booking]:
        return self.repository.get_user_bookings(user_id)

    def list_bookings(
        self,
        *,
        status: Optional[str] = None,
        photographer_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        if status is not None:
            status = _coerce(BookingStatus, status).value
        return self.repository.list_bookings(
            status=status, photographer_id=photographer_id, skip=skip, limit=limit
        )

    def count_bookings(
        self, *, status: Optional[str] = None, photographer_id: Optional[int] = None
    ) -> int:
        if status is not None:
            status = _coerce(BookingStatus, status).value
        return self.repository.count_bookings(status=status, photographer_id=photographer_id)

    # ------------------------------------------------------------------
    # Status mutation (the only write paths after creation)
    # ------------------------------------------------------------------

    @BaseService.measure_operation("update_status")
    def update_status(
        self, booking_id: int, new_status: Union[BookingStatus, str]
    ) -> Booking:
        """
        Move a booking along pending -> confirmed -> completed, or to cancelled.

        Setting the current status again is a no-op.

        Raises:
            NotFoundException: Unknown booking
            InvalidTransitionException: The move is not allowed
        """
        target = _coerce(BookingStatus, new_status)
        with self.transaction():
            booking = self._get_for_update(booking_id)
            self.apply_status(booking, target)
            self.repository.flush()
        return booking

    @BaseService.measure_operation("update_payment_status")
    def update_payment_status(
        self,
        booking_id: int,
        new_status: Union[PaymentStatus, str],
        intent_ref: Optional[str] = None,
    ) -> Booking:
        """
        Change the payment axis; ``intent_ref`` replaces the stored intent only when given.

        Raises:
            NotFoundException: Unknown booking
            InvalidTransitionException: e.g. paid back to pending
        """
        target = _coerce(PaymentStatus, new_status)
        with self.transaction():
            booking = self._get_for_update(booking_id)
            self.apply_payment_status(booking, target, intent_ref)
            self.repository.flush()
        return booking

    def apply_status(self, booking: Booking, target: BookingStatus) -> bool:
        """Apply a status transition to a loaded booking. Returns False for a no-op."""
        current = BookingStatus(booking.status)
        if current == target:
            return False
        if target not in BOOKING_STATUS_TRANSITIONS[current]:
            raise InvalidTransitionException("status", current.value, target.value)
        if target == BookingStatus.CANCELLED and booking.is_paid:
            # Paid bookings are cancelled by the gateway refund (charge.refunded).
            raise BusinessRuleException(
                "Paid bookings must be refunded through the payment gateway before cancelling",
                code="REFUND_REQUIRED",
                details={"booking_id": booking.id, "payment_status": booking.payment_status},
            )

        booking.status = target.value
        now = _now()
        if target == BookingStatus.CONFIRMED:
            booking.confirmed_at = now
        elif target == BookingStatus.COMPLETED:
            booking.completed_at = now
        elif target == BookingStatus.CANCELLED:
            booking.cancelled_at = now
        self.logger.info(
            "Booking %s status %s -> %s", booking.id, current.value, target.value
        )
        return True

    def apply_payment_status(
        self,
        booking: Booking,
        target: PaymentStatus,
        intent_ref: Optional[str] = None,
    ) -> bool:
        """Apply a payment transition to a loaded booking. Returns False for a no-op."""
        current = PaymentStatus(booking.payment_status)
        if current != target and target not in PAYMENT_STATUS_TRANSITIONS[current]:
            raise InvalidTransitionException("payment_status", current.value, target.value)

        changed = False
        if intent_ref and intent_ref != booking.payment_intent_id:
            booking.payment_intent_id = intent_ref
            changed = True
        if current != target:
            booking.payment_status = target.value
            changed = True
            self.logger.info(
                "Booking %s payment %s -> %s", booking.id, current.value, target.value
            )
        return changed

    def _get_for_update(self, booking_id: int) -> Booking:
        booking = self.repository.get_for_update(booking_id)
        if not booking:
            raise NotFoundException(
                f"Booking {booking_id} not found", details={"booking_id": booking_id}
            )
        return booking

    # ------------------------------------------------------------------
    # Customer / admin actions
    # ------------------------------------------------------------------

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self,
        booking_id: int,
        *,
        reason: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Booking:
        """
        Cancel a pending or confirmed booking, freeing the date.

        When ``user_id`` is given the booking must belong to that user.

        Raises:
            ForbiddenException: The booking belongs to someone else
            BusinessRuleException: The booking is paid (REFUND_REQUIRED); the
                gateway refund cancels it instead
        """
        with self.transaction():
            booking = self._get_for_update(booking_id)
            if user_id is not None and booking.user_id != user_id:
                raise ForbiddenException("You can only cancel your own bookings")
            if self.apply_status(booking, BookingStatus.CANCELLED):
                booking.cancellation_reason = reason
            self.repository.flush()

        return booking

    @BaseService.measure_operation("complete_booking")
    def complete_booking(self, booking_id: int) -> Booking:
        """Mark a confirmed booking as delivered. Admin-triggered, never automatic."""
        return self.update_status(booking_id, BookingStatus.COMPLETED)
