from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from weddinglens.core.exceptions import (
    BusinessRuleException,
    NotFoundException,
    ValidationException,
)
from weddinglens.models.earnings import EarningsRecord
from weddinglens.services.earnings_service import EarningsService

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def _ledger_sums(db, photographer_id=None):
    query = db.query(EarningsRecord).filter(EarningsRecord.status != "cancelled")
    if photographer_id is not None:
        query = query.filter(EarningsRecord.photographer_id == photographer_id)
    records = query.all()
    return (
        sum((r.amount for r in records), Decimal("0")),
        sum((r.platform_earnings for r in records), Decimal("0")),
        sum((r.photographer_earnings for r in records), Decimal("0")),
    )


def test_record_earning_splits_booking_total(db, make_booking):
    booking = make_booking()
    record = EarningsService(db).record_earning(booking.id)

    assert record.photographer_id == 1
    assert record.booking_id == booking.id
    assert record.amount == Decimal("1999.99")
    assert record.commission_rate == Decimal("0.15")
    assert record.platform_earnings == Decimal("300.00")
    assert record.photographer_earnings == Decimal("1699.99")
    assert record.status == "pending"
    assert record.platform_earnings + record.photographer_earnings == record.amount


def test_record_earning_is_idempotent_per_booking(db, make_booking):
    booking = make_booking()
    service = EarningsService(db)

    first = service.record_earning(booking.id)
    second = service.record_earning(booking.id, amount=Decimal("1.00"))

    assert second.id == first.id
    assert second.amount == Decimal("1999.99")
    assert db.query(EarningsRecord).count() == 1


def test_record_earning_with_explicit_amount_and_rate(db, make_booking):
    booking = make_booking()
    record = EarningsService(db).record_earning(
        booking.id, amount=Decimal("500.00"), commission_rate=Decimal("0.15")
    )

    assert record.platform_earnings == Decimal("75.00")
    assert record.photographer_earnings == Decimal("425.00")


def test_record_earning_validation(db, make_booking):
    booking = make_booking()
    service = EarningsService(db)

    with pytest.raises(NotFoundException):
        service.record_earning(999)
    with pytest.raises(ValidationException):
        service.record_earning(booking.id, commission_rate=Decimal("1.5"))
    with pytest.raises(ValidationException):
        service.record_earning(booking.id, amount=Decimal("0"))
    assert db.query(EarningsRecord).count() == 0


def test_summary_matches_ledger_rows(db, make_booking):
    service = EarningsService(db)
    for photographer_id in (1, 2, 3):
        booking = make_booking(photographer_id=photographer_id)
        service.record_earning(booking.id)
    extra = make_booking(photographer_id=1, event_date=datetime(2025, 12, 2).date())
    service.record_earning(extra.id, amount=Decimal("0.03"), commission_rate=Decimal("0.5"))

    summary = service.summary_for()
    total, platform, photographer = _ledger_sums(db)
    assert summary["total_earnings"] == total
    assert summary["platform_earnings"] == platform
    assert summary["photographer_earnings"] == photographer
    assert summary["pending_payouts"] == photographer

    per_photographer = service.summary_for(1)
    total_1, platform_1, photographer_1 = _ledger_sums(db, 1)
    assert per_photographer["total_earnings"] == total_1 == Decimal("2000.02")
    assert per_photographer["platform_earnings"] == platform_1
    assert per_photographer["photographer_earnings"] == photographer_1


def test_summary_excludes_cancelled_and_tracks_payouts(db, make_booking):
    service = EarningsService(db)
    kept = service.record_earning(make_booking(photographer_id=1).id)
    voided_booking = make_booking(photographer_id=2)
    service.record_earning(voided_booking.id)

    service.cancel_for_booking(voided_booking.id)
    service.mark_paid_out(kept.id)

    summary = service.summary_for()
    assert summary["total_earnings"] == Decimal("1999.99")
    assert summary["photographer_earnings"] == Decimal("1699.99")
    assert summary["pending_payouts"] == Decimal("0.00")


def test_summary_for_empty_ledger(db, catalog):
    summary = EarningsService(db).summary_for()
    assert summary == {
        "total_earnings": Decimal("0.00"),
        "platform_earnings": Decimal("0.00"),
        "photographer_earnings": Decimal("0.00"),
        "pending_payouts": Decimal("0.00"),
    }


def test_dashboard_month_over_month(db, make_booking):
    service = EarningsService(db)
    this_month = service.record_earning(make_booking(photographer_id=1).id)
    last_month = service.record_earning(make_booking(photographer_id=2).id, amount=Decimal("1000.00"))
    this_month.earned_at = datetime(2026, 3, 2, tzinfo=timezone.utc)
    last_month.earned_at = datetime(2026, 2, 20, tzinfo=timezone.utc)
    db.commit()

    dashboard = service.dashboard(now=NOW)

    assert dashboard["current_month_revenue"] == Decimal("1999.99")
    assert dashboard["previous_month_revenue"] == Decimal("1000.00")
    assert dashboard["monthly_growth"] == Decimal("100.00")
    assert dashboard["booking_count"] == 2
    assert dashboard["average_booking_value"] == Decimal("1500.00")
    assert dashboard["total_earnings"] == Decimal("2999.99")


def test_dashboard_without_previous_month_reports_zero_growth(db, make_booking):
    service = EarningsService(db)
    record = service.record_earning(make_booking().id)
    record.earned_at = datetime(2026, 3, 1, tzinfo=timezone.utc)
    db.commit()

    dashboard = service.dashboard(now=NOW)
    assert dashboard["monthly_growth"] == Decimal("0.00")
    assert dashboard["previous_month_revenue"] == Decimal("0.00")


def test_monthly_analytics_buckets_by_calendar_month(db, make_booking):
    service = EarningsService(db)
    jan = service.record_earning(make_booking(photographer_id=1).id)
    mar = service.record_earning(make_booking(photographer_id=2).id)
    old = service.record_earning(make_booking(photographer_id=3).id)
    jan.earned_at = datetime(2026, 1, 31, 23, 0, tzinfo=timezone.utc)
    mar.earned_at = datetime(2026, 3, 1, 0, 30, tzinfo=timezone.utc)
    old.earned_at = datetime(2025, 6, 1, tzinfo=timezone.utc)
    db.commit()

    series = service.monthly_analytics(months=3, now=NOW)

    assert [row["period"] for row in series] == ["2026-03", "2026-02", "2026-01"]
    assert [row["bookings"] for row in series] == [1, 0, 1]
    assert series[0]["amount"] == Decimal("1999.99")
    assert series[1]["amount"] == Decimal("0.00")


def test_monthly_analytics_crosses_year_boundary(db, catalog):
    series = EarningsService(db).monthly_analytics(
        months=3, now=datetime(2026, 1, 10, tzinfo=timezone.utc)
    )
    assert [row["period"] for row in series] == ["2026-01", "2025-12", "2025-11"]


@pytest.mark.parametrize("months", [0, 25])
def test_monthly_analytics_window_is_bounded(db, catalog, months):
    with pytest.raises(ValidationException):
        EarningsService(db).monthly_analytics(months=months)


def test_mark_paid_out(db, make_booking):
    service = EarningsService(db)
    record = service.record_earning(make_booking().id)

    paid = service.mark_paid_out(record.id)
    assert paid.status == "paid"
    assert paid.paid_at is not None
    assert service.mark_paid_out(record.id).status == "paid"

    with pytest.raises(NotFoundException):
        service.mark_paid_out(999)


def test_cancelled_record_cannot_be_paid_out(db, make_booking):
    service = EarningsService(db)
    booking = make_booking()
    record = service.record_earning(booking.id)
    service.cancel_for_booking(booking.id)

    with pytest.raises(BusinessRuleException):
        service.mark_paid_out(record.id)


def test_cancel_for_booking_without_record(db, make_booking):
    assert EarningsService(db).cancel_for_booking(make_booking().id) is None


def test_list_earnings_filters_by_photographer(db, make_booking):
    service = EarningsService(db)
    service.record_earning(make_booking(photographer_id=1).id)
    service.record_earning(make_booking(photographer_id=2).id)

    assert len(service.list_earnings()) == 2
    assert [r.photographer_id for r in service.list_earnings(2)] == [2]
    assert service.get_for_booking(999) is None
