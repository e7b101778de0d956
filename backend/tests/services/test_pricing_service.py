from __future__ import annotations

from decimal import Decimal

import pytest

from weddinglens.core.config import settings
from weddinglens.core.exceptions import NotFoundException, ValidationException
from weddinglens.services.pricing_service import (
    PricingService,
    quantize_money,
    split_commission,
    to_minor_units,
)


def test_quote_for_package_uses_package_price(db, catalog):
    quote = PricingService(db).quote(1, {7: 3})

    assert quote.total == Decimal("1999.99")
    assert quote.package_id == 1
    assert quote.package_name
    assert quote.lines == []


def test_quote_for_services_sums_price_times_quantity(db, catalog):
    quote = PricingService(db).quote(None, {1: 1, 3: 2, 8: 0})

    assert quote.total == Decimal("2299.97")
    assert [(line.service_id, line.quantity) for line in quote.lines] == [(1, 1), (3, 2)]
    assert quote.lines[1].subtotal == Decimal("1799.98")


def test_empty_selection_costs_nothing(db, catalog):
    assert PricingService(db).quote(None, {}).total == Decimal("0.00")


def test_quote_unknown_ids(db, catalog):
    service = PricingService(db)
    with pytest.raises(NotFoundException):
        service.quote(99, None)
    with pytest.raises(NotFoundException):
        service.quote(None, {1: 1, 77: 1})


def test_check_amount_accepts_matching_total(db, catalog, monkeypatch):
    monkeypatch.setattr(settings, "enforce_server_pricing", True)
    quote = PricingService(db).check_amount(Decimal("1999.990"), 1, {})
    assert quote.total == Decimal("1999.99")


def test_check_amount_mismatch_only_logged_when_not_enforced(db, catalog, monkeypatch, caplog):
    monkeypatch.setattr(settings, "enforce_server_pricing", False)
    quote = PricingService(db).check_amount(Decimal("1.00"), 1, {})

    assert quote.total == Decimal("1999.99")
    assert "differs from catalog quote" in caplog.text


def test_check_amount_mismatch_rejected_when_enforced(db, catalog, monkeypatch):
    monkeypatch.setattr(settings, "enforce_server_pricing", True)
    with pytest.raises(ValidationException) as exc_info:
        PricingService(db).check_amount(Decimal("1.00"), 1, {})
    assert exc_info.value.details == {"supplied": "1.00", "expected": "1999.99"}


def test_split_commission_scenario_amount():
    platform, photographer = split_commission(Decimal("500.00"), Decimal("0.15"))

    assert to_minor_units(platform) == 7500
    assert to_minor_units(photographer) == 42500


@pytest.mark.parametrize(
    "amount, rate",
    [
        ("1999.99", "0.15"),
        ("0.01", "0.15"),
        ("0.03", "0.5"),
        ("4999.99", "0.175"),
        ("123.45", "0"),
        ("123.45", "1"),
    ],
)
def test_split_commission_always_sums_to_amount(amount, rate):
    total = Decimal(amount)
    platform, photographer = split_commission(total, Decimal(rate))

    assert platform + photographer == total
    assert platform == quantize_money(total * Decimal(rate))


def test_split_commission_rounds_platform_share_half_up():
    # 0.03 * 0.5 = 0.015 -> 0.02 for the platform, remainder to the photographer
    assert split_commission(Decimal("0.03"), Decimal("0.5")) == (Decimal("0.02"), Decimal("0.01"))


def test_to_minor_units():
    assert to_minor_units(Decimal("1999.99")) == 199999
    assert to_minor_units(Decimal("500")) == 50000
    assert to_minor_units(Decimal("0.005")) == 1
