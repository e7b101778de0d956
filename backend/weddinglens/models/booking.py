# backend/weddinglens/models/booking.py
"""
Booking model for the WeddingLens platform.

A booking reserves one photographer for one event date. It carries two
independent status axes: ``status`` (the reservation lifecycle) and
``payment_status`` (the state of the money). Bookings are never deleted;
cancellation is a status value and frees the date for rebooking.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet, Mapping

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Created, awaiting payment
    CONFIRMED = "confirmed"  # Paid
    COMPLETED = "completed"  # Event delivered (admin action)
    CANCELLED = "cancelled"  # Slot released


class PaymentStatus(str, Enum):
    """Payment statuses mirrored from the gateway."""

    PENDING = "pending"
    PROCESSING = "processing"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


class EventType(str, Enum):
    """Wedding events a photographer can be booked for."""

    PRE_WEDDING = "pre-wedding"
    MEHENDI = "mehendi"
    HALDI = "haldi"
    SANGEET = "sangeet"
    WEDDING = "wedding"
    RECEPTION = "reception"
    POST_WEDDING = "post-wedding"


# Allowed forward moves. Same-state updates are no-ops and never listed here.
BOOKING_STATUS_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

PAYMENT_STATUS_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset(
        {PaymentStatus.PROCESSING, PaymentStatus.PAID, PaymentStatus.FAILED}
    ),
    PaymentStatus.PROCESSING: frozenset(
        {PaymentStatus.PENDING, PaymentStatus.PAID, PaymentStatus.FAILED}
    ),
    PaymentStatus.FAILED: frozenset(
        {PaymentStatus.PENDING, PaymentStatus.PROCESSING, PaymentStatus.PAID}
    ),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}


class Booking(Base):
    """
    A customer's reservation of a photographer for an event date.

    ``user_id``, ``photographer_id`` and ``event_date`` are fixed at creation;
    changing any of them means cancelling and booking again.
    """

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(Integer, nullable=False, index=True)
    photographer_id = Column(Integer, ForeignKey("photographers.id"), nullable=False)
    package_id = Column(Integer, ForeignKey("packages.id"), nullable=True)

    event_date = Column(Date, nullable=False)
    event_type = Column(String(20), nullable=False)
    location = Column(String(255), nullable=False)

    # {"<service_id>": quantity}; JSON object keys are strings
    services = Column(JSON, nullable=False, default=dict)
    total_amount = Column(Numeric(12, 2), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_intent_id = Column(String(255), nullable=True, index=True)

    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=lambda: datetime.now(timezone.utc),
    )
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    photographer = relationship("Photographer", lazy="joined")
    package = relationship("Package", lazy="joined")
    earnings_record = relationship("EarningsRecord", back_populates="booking", uselist=False)

    __table_args__ = (
        CheckConstraint("total_amount > 0", name="ck_bookings_total_amount_positive"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name="ck_bookings_status",
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'processing', 'paid', 'refunded', 'failed')",
            name="ck_bookings_payment_status",
        ),
        Index("ix_bookings_photographer_date", "photographer_id", "event_date"),
        # At most one active booking per photographer per date.
        Index(
            "uq_bookings_active_slot",
            "photographer_id",
            "event_date",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: photographer={self.photographer_id} "
            f"date={self.event_date} status={self.status}/{self.payment_status}>"
        )

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED.value

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    @property
    def selected_services(self) -> Dict[int, int]:
        """Service selection as {service_id: quantity}."""
        raw: Mapping[str, int] = self.services or {}
        return {int(key): int(qty) for key, qty in raw.items()}
