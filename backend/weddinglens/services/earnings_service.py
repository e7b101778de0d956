# backend/weddinglens/services/earnings_service.py
"""
Earnings Service for WeddingLens

Records the platform/photographer split for each paid booking and answers
summary questions about it. Summaries are recomputed from the ledger rows
on every call; there is no cached total to drift out of sync.
"""

from datetime import datetime, timezone
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import DEFAULT_ANALYTICS_MONTHS, MAX_ANALYTICS_MONTHS
from ..core.exceptions import BusinessRuleException, NotFoundException, ValidationException
from ..models.booking import Booking
from ..models.earnings import EarningsRecord, EarningsStatus
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .pricing_service import quantize_money, split_commission

logger = logging.getLogger(__name__)

_ZERO = Decimal("0.00")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _month_start(moment: datetime, months_back: int = 0) -> datetime:
    """First instant of the month ``months_back`` months before ``moment``'s month."""
    index = moment.year * 12 + (moment.month - 1) - months_back
    return datetime(index // 12, index % 12 + 1, 1, tzinfo=moment.tzinfo)


def _month_key(moment: datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


def _as_utc(moment: datetime) -> datetime:
    # sqlite hands back naive datetimes even for timezone-aware columns
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


class EarningsService(BaseService):
    """Ledger of platform/photographer revenue splits."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_earnings_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("record_earning")
    def record_earning(
        self,
        booking_id: int,
        amount: Optional[Decimal] = None,
        commission_rate: Optional[Decimal] = None,
    ) -> EarningsRecord:
        """
        Create the earnings record for a paid booking, once.

        If the booking already has a record it is returned unchanged, so
        redelivered payment events never double-count revenue.

        Args:
            booking_id: Paid booking
            amount: Amount collected; defaults to the booking total
            commission_rate: Platform share; defaults to the configured rate
        """
        with self.transaction():
            existing = self.repository.get_by_booking(booking_id)
            if existing is not None:
                self.logger.info(
                    "Earnings for booking %s already recorded (record %s)",
                    booking_id,
                    existing.id,
                )
                return existing

            booking: Optional[Booking] = self.booking_repository.get_by_id(
                booking_id, load_relationships=False
            )
            if booking is None:
                raise NotFoundException(
                    f"Booking {booking_id} not found", details={"booking_id": booking_id}
                )

            total = quantize_money(amount if amount is not None else booking.total_amount)
            if total <= 0:
                raise ValidationException("Earnings amount must be positive")
            rate = Decimal(
                commission_rate if commission_rate is not None else settings.platform_commission_rate
            )
            if rate < 0 or rate > 1:
                raise ValidationException("Commission rate must be between 0 and 1")

            platform, photographer = split_commission(total, rate)
            record = self.repository.create(
                photographer_id=booking.photographer_id,
                booking_id=booking.id,
                amount=total,
                commission_rate=rate,
                platform_earnings=platform,
                photographer_earnings=photographer,
                status=EarningsStatus.PENDING.value,
                earned_at=_now(),
            )

        self.log_operation(
            "record_earning",
            booking_id=booking_id,
            amount=str(total),
            platform_earnings=str(platform),
            photographer_earnings=str(photographer),
        )
        return record

    def get_for_booking(self, booking_id: int) -> Optional[EarningsRecord]:
        return self.repository.get_by_booking(booking_id)

    def list_earnings(self, photographer_id: Optional[int] = None) -> List[EarningsRecord]:
        return self.repository.list_records(photographer_id)

    @BaseService.measure_operation("summary_for")
    def summary_for(self, photographer_id: Optional[int] = None) -> Dict[str, Decimal]:
        """
        Totals over non-cancelled records, optionally for one photographer.

        ``pending_payouts`` is the photographer share not yet paid out.
        """
        totals = self.repository.aggregate(photographer_id)
        return {
            "total_earnings": quantize_money(totals["total_earnings"]),
            "platform_earnings": quantize_money(totals["platform_earnings"]),
            "photographer_earnings": quantize_money(totals["photographer_earnings"]),
            "pending_payouts": quantize_money(totals["pending_payouts"]),
        }

    @BaseService.measure_operation("earnings_dashboard")
    def dashboard(
        self, photographer_id: Optional[int] = None, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Summary plus month-over-month figures for the earnings dashboard.

        ``monthly_growth`` is the percentage change of this month's revenue
        over last month's (0 when last month had none).
        """
        now = _as_utc(now or _now())
        this_month = _month_start(now)
        last_month = _month_start(now, 1)

        current = _ZERO
        previous = _ZERO
        for record in self.repository.list_records(
            photographer_id, since=last_month, include_cancelled=False
        ):
            earned = _as_utc(record.earned_at)
            if earned >= this_month:
                current += record.amount
            elif earned >= last_month:
                previous += record.amount

        totals = self.repository.aggregate(photographer_id)
        count = totals["record_count"]
        growth = (
            ((current - previous) / previous * 100).quantize(Decimal("0.01"))
            if previous > 0
            else _ZERO
        )
        average = quantize_money(totals["total_earnings"] / count) if count else _ZERO

        return {
            **self.summary_for(photographer_id),
            "current_month_revenue": quantize_money(current),
            "previous_month_revenue": quantize_money(previous),
            "monthly_growth": growth,
            "average_booking_value": average,
            "booking_count": count,
        }

    @BaseService.measure_operation("monthly_analytics")
    def monthly_analytics(
        self,
        photographer_id: Optional[int] = None,
        months: int = DEFAULT_ANALYTICS_MONTHS,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Revenue and booking count per calendar month, most recent month first."""
        if months < 1 or months > MAX_ANALYTICS_MONTHS:
            raise ValidationException(
                f"months must be between 1 and {MAX_ANALYTICS_MONTHS}",
                details={"months": months},
            )
        now = _as_utc(now or _now())
        window_start = _month_start(now, months - 1)

        buckets: Dict[str, Dict[str, Any]] = {}
        for offset in range(months):
            key = _month_key(_month_start(now, offset))
            buckets[key] = {"period": key, "amount": _ZERO, "bookings": 0}

        for record in self.repository.list_records(
            photographer_id, since=window_start, include_cancelled=False
        ):
            bucket = buckets.get(_month_key(_as_utc(record.earned_at)))
            if bucket is not None:
                bucket["amount"] = quantize_money(bucket["amount"] + record.amount)
                bucket["bookings"] += 1

        return list(buckets.values())

    @BaseService.measure_operation("mark_paid_out")
    def mark_paid_out(self, record_id: int) -> EarningsRecord:
        """Record that the photographer share has been paid out."""
        with self.transaction():
            record = self.repository.get_by_id(record_id)
            if record is None:
                raise NotFoundException(
                    f"Earnings record {record_id} not found", details={"record_id": record_id}
                )
            if record.status == EarningsStatus.PAID.value:
                return record
            if record.status != EarningsStatus.PENDING.value:
                raise BusinessRuleException(
                    f"Cannot pay out a {record.status} earnings record",
                    code="INVALID_EARNINGS_STATUS",
                )
            record.status = EarningsStatus.PAID.value
            record.paid_at = _now()
            self.repository.flush()
        return record

    @BaseService.measure_operation("cancel_for_booking")
    def cancel_for_booking(self, booking_id: int) -> Optional[EarningsRecord]:
        """Void the earnings of a refunded booking. Returns None if it had none."""
        with self.transaction():
            record = self.repository.get_by_booking(booking_id)
            if record is None:
                return None
            if record.status == EarningsStatus.PAID.value:
                self.logger.warning(
                    "Refunded booking %s was already paid out (record %s); needs clawback",
                    booking_id,
                    record.id,
                )
            record.status = EarningsStatus.CANCELLED.value
            self.repository.flush()
        return record
