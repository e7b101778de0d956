# backend/weddinglens/models/earnings.py
"""Earnings split recorded once per paid booking."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..database import Base


class EarningsStatus(str, Enum):
    PENDING = "pending"  # Owed to the photographer
    PAID = "paid"  # Paid out
    CANCELLED = "cancelled"  # Booking refunded


class EarningsRecord(Base):
    """
    Platform/photographer split of one paid booking.

    ``platform_earnings + photographer_earnings == amount`` exactly; the
    photographer share is derived by subtraction so no rounding residue is lost.
    """

    __tablename__ = "earnings_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    photographer_id = Column(Integer, ForeignKey("photographers.id"), nullable=False)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    commission_rate = Column(Numeric(5, 4), nullable=False)
    platform_earnings = Column(Numeric(12, 2), nullable=False)
    photographer_earnings = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=EarningsStatus.PENDING.value)
    earned_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    paid_at = Column(DateTime(timezone=True), nullable=True)

    booking = relationship("Booking", back_populates="earnings_record")

    __table_args__ = (
        UniqueConstraint("booking_id", name="uq_earnings_records_booking_id"),
        Index("ix_earnings_records_photographer_status", "photographer_id", "status"),
        Index("ix_earnings_records_earned_at", "earned_at"),
        CheckConstraint(
            "status IN ('pending', 'paid', 'cancelled')", name="ck_earnings_records_status"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<EarningsRecord {self.id}: booking={self.booking_id} "
            f"amount={self.amount} status={self.status}>"
        )
