# backend/weddinglens/repositories/earnings_repository.py
"""Earnings ledger queries. Aggregates are always computed from the rows."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from ..models.earnings import EarningsRecord, EarningsStatus
from .base_repository import BaseRepository

_ZERO = Decimal("0")


def _as_decimal(value) -> Decimal:
    if value is None:
        return _ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


class EarningsRepository(BaseRepository[EarningsRecord]):
    def __init__(self, db: Session):
        super().__init__(db, EarningsRecord)

    def get_by_booking(self, booking_id: int) -> Optional[EarningsRecord]:
        return self.find_one_by(booking_id=booking_id)

    def list_records(
        self,
        photographer_id: Optional[int] = None,
        *,
        since: Optional[datetime] = None,
        include_cancelled: bool = True,
    ) -> List[EarningsRecord]:
        query = self._build_query()
        if photographer_id is not None:
            query = query.filter(EarningsRecord.photographer_id == photographer_id)
        if since is not None:
            query = query.filter(EarningsRecord.earned_at >= since)
        if not include_cancelled:
            query = query.filter(EarningsRecord.status != EarningsStatus.CANCELLED.value)
        return self._execute_query(
            query.order_by(EarningsRecord.earned_at.desc(), EarningsRecord.id.desc())
        )

    def aggregate(self, photographer_id: Optional[int] = None) -> Dict[str, Any]:
        """Sum the non-cancelled ledger in one query."""
        pending = case(
            (
                EarningsRecord.status == EarningsStatus.PENDING.value,
                EarningsRecord.photographer_earnings,
            ),
            else_=0,
        )
        query = self.db.query(
            func.sum(EarningsRecord.amount),
            func.sum(EarningsRecord.platform_earnings),
            func.sum(EarningsRecord.photographer_earnings),
            func.sum(pending),
            func.count(EarningsRecord.id),
        ).filter(EarningsRecord.status != EarningsStatus.CANCELLED.value)
        if photographer_id is not None:
            query = query.filter(EarningsRecord.photographer_id == photographer_id)

        row = self._execute_query(query)[0]
        return {
            "total_earnings": _as_decimal(row[0]),
            "platform_earnings": _as_decimal(row[1]),
            "photographer_earnings": _as_decimal(row[2]),
            "pending_payouts": _as_decimal(row[3]),
            "record_count": int(row[4] or 0),
        }
