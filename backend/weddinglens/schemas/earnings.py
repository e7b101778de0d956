"""Earnings schemas for WeddingLens."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel


class EarningsRecordResponse(StrictModel):
    id: int
    photographer_id: int
    booking_id: int
    amount: Decimal
    commission_rate: Decimal
    platform_earnings: Decimal
    photographer_earnings: Decimal
    status: str
    earned_at: datetime
    paid_at: Optional[datetime] = None


class EarningsSummaryResponse(StrictModel):
    """Totals over non-cancelled earnings records."""

    total_earnings: Decimal
    platform_earnings: Decimal
    photographer_earnings: Decimal
    pending_payouts: Decimal
    current_month_revenue: Decimal
    previous_month_revenue: Decimal
    monthly_growth: Decimal = Field(..., description="Percent change over the previous month")
    average_booking_value: Decimal
    booking_count: int


class MonthlyEarnings(StrictModel):
    period: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    amount: Decimal
    bookings: int


class EarningsAnalyticsResponse(StrictModel):
    photographer_id: Optional[int] = None
    months: List[MonthlyEarnings]


class EarningsDashboardResponse(StrictModel):
    """Earnings dashboard: headline figures plus the underlying records."""

    photographer_id: Optional[int] = None
    summary: EarningsSummaryResponse
    records: List[EarningsRecordResponse] = Field(default_factory=list)
