from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from weddinglens.core.exceptions import RepositoryException
from weddinglens.repositories.factory import RepositoryFactory


def _record(booking_id, photographer_id=1, amount="100.00", status="pending", earned_at=None):
    amount = Decimal(amount)
    platform = (amount * Decimal("0.15")).quantize(Decimal("0.01"))
    return {
        "photographer_id": photographer_id,
        "booking_id": booking_id,
        "amount": amount,
        "commission_rate": Decimal("0.15"),
        "platform_earnings": platform,
        "photographer_earnings": amount - platform,
        "status": status,
        "earned_at": earned_at or datetime(2026, 3, 1, tzinfo=timezone.utc),
    }


@pytest.fixture
def three_bookings(make_booking):
    return [
        make_booking(photographer_id=1),
        make_booking(photographer_id=2),
        make_booking(photographer_id=3),
    ]


def test_aggregate_skips_cancelled_records(db, three_bookings):
    repo = RepositoryFactory.create_earnings_repository(db)
    repo.create(**_record(three_bookings[0].id, 1, "100.00"))
    repo.create(**_record(three_bookings[1].id, 2, "200.00", status="paid"))
    repo.create(**_record(three_bookings[2].id, 3, "400.00", status="cancelled"))

    totals = repo.aggregate()

    assert totals["total_earnings"] == Decimal("300.00")
    assert totals["platform_earnings"] == Decimal("45.00")
    assert totals["photographer_earnings"] == Decimal("255.00")
    assert totals["pending_payouts"] == Decimal("85.00")
    assert totals["record_count"] == 2
    assert repo.aggregate(2)["total_earnings"] == Decimal("200.00")
    assert repo.aggregate(3)["record_count"] == 0


def test_one_record_per_booking(db, three_bookings):
    repo = RepositoryFactory.create_earnings_repository(db)
    repo.create(**_record(three_bookings[0].id))
    db.commit()

    with pytest.raises(RepositoryException):
        repo.create(**_record(three_bookings[0].id))


def test_list_records_filters(db, three_bookings):
    repo = RepositoryFactory.create_earnings_repository(db)
    old = repo.create(
        **_record(three_bookings[0].id, 1, earned_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    )
    recent = repo.create(**_record(three_bookings[1].id, 1))
    cancelled = repo.create(**_record(three_bookings[2].id, 3, status="cancelled"))

    assert [r.id for r in repo.list_records(1)] == [recent.id, old.id]
    since = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert [r.id for r in repo.list_records(since=since)] == [cancelled.id, recent.id]
    assert [r.id for r in repo.list_records(since=since, include_cancelled=False)] == [recent.id]
    assert repo.get_by_booking(three_bookings[2].id).id == cancelled.id
