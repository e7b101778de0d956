from __future__ import annotations

from datetime import date
from decimal import Decimal
import json

import pytest

from tests.factories.booking_builders import booking_request
from tests.helpers.fake_gateway import FakeGateway
from tests.helpers.stripe_events import (
    TEST_WEBHOOK_SECRET,
    intent_object,
    refund_object,
    sign_payload,
    stripe_event,
)
from weddinglens.core.exceptions import (
    ServiceException,
    UnauthorizedException,
    ValidationException,
)
from weddinglens.models.booking import Booking
from weddinglens.models.catalog import Photographer
from weddinglens.models.earnings import EarningsRecord
from weddinglens.models.webhook_event import WebhookEvent
from weddinglens.services.availability_service import AvailabilityService
from weddinglens.services.booking_service import BookingService
from weddinglens.services.earnings_service import EarningsService
from weddinglens.services.payment_webhook_service import (
    PaymentWebhookService,
    extract_booking_id,
)
from weddinglens.services.stripe_service import StripeService


@pytest.fixture
def reconciler(db, catalog):
    return PaymentWebhookService(db, webhook_secret=TEST_WEBHOOK_SECRET)


def deliver(service: PaymentWebhookService, event_type, obj, event_id="evt_test_1"):
    payload = stripe_event(event_type, obj, event_id=event_id)
    return service.handle_gateway_event(payload, sign_payload(payload))


def reload(db, booking_id) -> Booking:
    db.expire_all()
    return db.get(Booking, booking_id)


def reload_ledger(db) -> WebhookEvent:
    db.expire_all()
    return db.query(WebhookEvent).one()


def test_end_to_end_booking_payment_and_earnings(db, catalog):
    db.add(Photographer(id=7, name="Meera Iyer", bio="", specialties=[], experience=5, location="Chennai"))
    db.commit()
    event_day = date(2025, 12, 1)
    booking = BookingService(db).create_booking(
        1,
        booking_request(
            photographer_id=7,
            event_date=event_day,
            package_id=None,
            services={},
            total_amount=Decimal("500.00"),
        ),
    )
    assert AvailabilityService(db).is_available(7, event_day) is False

    intent = StripeService(db, FakeGateway()).create_intent(booking.id)
    result = deliver(
        PaymentWebhookService(db, webhook_secret=TEST_WEBHOOK_SECRET),
        "payment_intent.succeeded",
        intent_object(booking.id, amount_minor=50000, intent_id=intent["payment_intent_id"]),
    )

    assert result == {"received": True, "event_type": "payment_intent.succeeded", "status": "processed"}
    stored = reload(db, booking.id)
    assert stored.status == "confirmed"
    assert stored.payment_status == "paid"
    assert stored.payment_intent_id == intent["payment_intent_id"]

    records = db.query(EarningsRecord).all()
    assert len(records) == 1
    assert records[0].platform_earnings == Decimal("75.00")
    assert records[0].photographer_earnings == Decimal("425.00")
    assert records[0].photographer_id == 7


def test_duplicate_delivery_records_one_earning(db, make_booking, reconciler):
    booking = make_booking()
    obj = intent_object(booking.id)

    first = deliver(reconciler, "payment_intent.succeeded", obj, event_id="evt_dup")
    state_after_first = (reload(db, booking.id).status, reload(db, booking.id).payment_status)
    second = deliver(reconciler, "payment_intent.succeeded", obj, event_id="evt_dup")

    assert first["status"] == "processed"
    assert second["status"] == "duplicate"
    assert db.query(EarningsRecord).count() == 1
    stored = reload(db, booking.id)
    assert (stored.status, stored.payment_status) == state_after_first

    ledger = db.query(WebhookEvent).one()
    assert ledger.retry_count == 1
    assert ledger.status == "processed"
    assert ledger.related_booking_id == booking.id


def test_distinct_success_events_for_one_booking_record_one_earning(db, make_booking, reconciler):
    booking = make_booking()

    deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), event_id="evt_a")
    second = deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), event_id="evt_b")

    assert second["status"] == "processed"
    assert db.query(EarningsRecord).count() == 1
    assert db.query(WebhookEvent).count() == 2


def test_success_for_unknown_booking_is_acknowledged(db, reconciler):
    result = deliver(reconciler, "payment_intent.succeeded", intent_object(999))

    assert result["status"] == "ignored"
    assert db.query(EarningsRecord).count() == 0
    assert db.query(WebhookEvent).one().processing_error == "booking not found"


def test_success_without_booking_metadata_is_acknowledged(db, reconciler):
    obj = intent_object(1)
    obj["metadata"] = {}

    assert deliver(reconciler, "payment_intent.succeeded", obj)["status"] == "ignored"


def test_success_for_cancelled_booking_is_not_applied(db, make_booking, reconciler):
    booking = make_booking()
    BookingService(db).cancel_booking(booking.id)

    result = deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id))

    assert result["status"] == "ignored"
    stored = reload(db, booking.id)
    assert stored.status == "cancelled"
    assert stored.payment_status == "pending"
    assert db.query(EarningsRecord).count() == 0


def test_success_with_amount_mismatch_is_applied_and_logged(db, make_booking, reconciler, caplog):
    booking = make_booking()

    result = deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id, amount_minor=100))

    assert result["status"] == "processed"
    assert "gateway collected 100 minor units" in caplog.text
    assert reload(db, booking.id).payment_status == "paid"


def test_success_keeps_completed_booking_completed(db, make_booking, reconciler):
    booking = make_booking()
    booking.status = "completed"
    db.commit()

    deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id))

    stored = reload(db, booking.id)
    assert stored.status == "completed"
    assert stored.payment_status == "paid"


def test_processing_then_success(db, make_booking, reconciler):
    booking = make_booking()

    deliver(reconciler, "payment_intent.processing", intent_object(booking.id, status="processing"), "evt_1")
    assert reload(db, booking.id).payment_status == "processing"

    deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), "evt_2")
    stored = reload(db, booking.id)
    assert stored.payment_status == "paid"
    assert stored.status == "confirmed"


def test_payment_failed_keeps_booking_pending(db, make_booking, reconciler):
    booking = make_booking()
    obj = intent_object(booking.id, status="requires_payment_method")
    obj["last_payment_error"] = {"message": "Your card was declined."}

    result = deliver(reconciler, "payment_intent.payment_failed", obj)

    assert result["status"] == "processed"
    stored = reload(db, booking.id)
    assert stored.payment_status == "failed"
    assert stored.status == "pending"
    assert AvailabilityService(db).is_available(1, stored.event_date) is False


def test_late_failure_after_success_is_ignored(db, make_booking, reconciler):
    booking = make_booking()
    deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), "evt_ok")

    result = deliver(
        reconciler,
        "payment_intent.payment_failed",
        intent_object(booking.id, status="requires_payment_method"),
        "evt_late",
    )

    assert result["status"] == "ignored"
    stored = reload(db, booking.id)
    assert stored.payment_status == "paid"
    assert stored.status == "confirmed"
    late = db.query(WebhookEvent).filter(WebhookEvent.event_id == "evt_late").one()
    assert late.status == "ignored"
    assert "paid" in late.processing_error


def test_late_processing_after_success_is_ignored(db, make_booking, reconciler):
    booking = make_booking()
    deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), "evt_ok")

    result = deliver(
        reconciler, "payment_intent.processing", intent_object(booking.id, status="processing"), "evt_late"
    )

    assert result["status"] == "ignored"
    assert reload(db, booking.id).payment_status == "paid"


def test_full_refund_cancels_and_voids_earnings(db, make_booking, reconciler):
    booking = make_booking()
    deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), "evt_paid")

    result = deliver(reconciler, "charge.refunded", refund_object(booking.id), "evt_refund")

    assert result["status"] == "processed"
    stored = reload(db, booking.id)
    assert stored.payment_status == "refunded"
    assert stored.status == "cancelled"
    assert stored.cancellation_reason == "refunded"
    assert db.query(EarningsRecord).one().status == "cancelled"
    assert EarningsService(db).summary_for()["total_earnings"] == Decimal("0.00")
    assert AvailabilityService(db).is_available(1, stored.event_date) is True


def test_refund_found_by_payment_intent(db, make_booking, reconciler):
    booking = make_booking()
    deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id, intent_id="pi_xyz"), "evt_paid")

    deliver(reconciler, "charge.refunded", refund_object(None, intent_id="pi_xyz"), "evt_refund")

    assert reload(db, booking.id).payment_status == "refunded"


def test_partial_refund_is_ignored(db, make_booking, reconciler):
    booking = make_booking()
    deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), "evt_paid")

    result = deliver(
        reconciler, "charge.refunded", refund_object(booking.id, amount_refunded=5000), "evt_partial"
    )

    assert result["status"] == "ignored"
    stored = reload(db, booking.id)
    assert stored.payment_status == "paid"
    assert stored.status == "confirmed"
    assert db.query(EarningsRecord).one().status == "pending"


def test_refund_of_unpaid_booking_is_ignored(db, make_booking, reconciler):
    booking = make_booking()

    result = deliver(reconciler, "charge.refunded", refund_object(booking.id), "evt_refund")

    assert result["status"] == "ignored"
    assert reload(db, booking.id).payment_status == "pending"


def test_unhandled_event_type_is_acknowledged(db, reconciler):
    result = deliver(reconciler, "customer.created", {"id": "cus_1"})

    assert result == {"received": True, "event_type": "customer.created", "status": "ignored"}
    assert db.query(WebhookEvent).one().status == "ignored"


def test_missing_signature_is_rejected_without_ledger_entry(db, make_booking, reconciler):
    booking = make_booking()
    payload = stripe_event("payment_intent.succeeded", intent_object(booking.id))

    with pytest.raises(UnauthorizedException) as exc_info:
        reconciler.handle_gateway_event(payload, None)

    assert exc_info.value.code == "INVALID_SIGNATURE"
    assert db.query(WebhookEvent).count() == 0
    assert reload(db, booking.id).payment_status == "pending"


def test_bad_signature_is_rejected(db, make_booking, reconciler):
    booking = make_booking()
    payload = stripe_event("payment_intent.succeeded", intent_object(booking.id))

    with pytest.raises(UnauthorizedException):
        reconciler.handle_gateway_event(payload, sign_payload(payload, secret="whsec_wrong"))

    assert db.query(WebhookEvent).count() == 0
    assert db.query(EarningsRecord).count() == 0


def test_tampered_body_is_rejected(db, make_booking, reconciler):
    booking = make_booking()
    payload = stripe_event("payment_intent.succeeded", intent_object(booking.id))
    signature = sign_payload(payload)
    tampered = payload.replace(b"199999", b"100")

    with pytest.raises(UnauthorizedException):
        reconciler.handle_gateway_event(tampered, signature)


def test_unsigned_events_accepted_when_no_secret_configured(db, make_booking, caplog):
    booking = make_booking()
    service = PaymentWebhookService(db, webhook_secret="")
    payload = stripe_event("payment_intent.succeeded", intent_object(booking.id))

    result = service.handle_gateway_event(payload, None)

    assert result["status"] == "processed"
    assert "accepting unauthenticated event" in caplog.text


def test_malformed_body_is_rejected(db, catalog):
    service = PaymentWebhookService(db, webhook_secret="")

    with pytest.raises(ValidationException):
        service.handle_gateway_event(b"not json", None)
    with pytest.raises(ValidationException):
        service.handle_gateway_event(json.dumps([1, 2]).encode(), None)


def test_event_without_id_is_keyed_by_body_hash(db, make_booking):
    booking = make_booking()
    service = PaymentWebhookService(db, webhook_secret="")
    payload = json.dumps(
        {"type": "payment_intent.succeeded", "data": {"object": intent_object(booking.id)}}
    ).encode()

    service.handle_gateway_event(payload, None)
    again = service.handle_gateway_event(payload, None)

    assert again["status"] == "duplicate"
    assert db.query(WebhookEvent).one().event_id.startswith("sha256:")


def test_storage_failure_is_recorded_and_retried(db, make_booking, reconciler, monkeypatch):
    booking = make_booking()

    def _broken(*args, **kwargs):
        raise ServiceException("Database operation failed: disk I/O error")

    monkeypatch.setattr(reconciler.earnings_service, "record_earning", _broken)

    with pytest.raises(ServiceException):
        deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), "evt_retry")

    ledger = db.query(WebhookEvent).one()
    assert ledger.status == "failed"
    assert "disk I/O error" in ledger.processing_error
    assert reload(db, booking.id).payment_status == "pending"
    assert db.query(EarningsRecord).count() == 0

    monkeypatch.undo()
    result = deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), "evt_retry")

    assert result["status"] == "processed"
    assert db.query(EarningsRecord).count() == 1
    ledger = reload_ledger(db)
    assert ledger.status == "processed"
    assert ledger.retry_count == 1


def test_unexpected_error_is_wrapped(db, make_booking, reconciler, monkeypatch):
    booking = make_booking()
    def _boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(reconciler.earnings_service, "record_earning", _boom)

    with pytest.raises(ServiceException):
        deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id))

    assert db.query(WebhookEvent).one().status == "failed"


@pytest.mark.parametrize(
    "metadata, expected",
    [
        ({"bookingId": "12"}, 12),
        ({"bookingId": 12}, 12),
        ({"booking_id": " 7 "}, 7),
        ({"bookingId": "0"}, None),
        ({"bookingId": "-3"}, None),
        ({"bookingId": "abc"}, None),
        ({"bookingId": True}, None),
        ({"bookingId": "\u00b2"}, None),
        ({"bookingId": "\u0661\u0662"}, None),
        ({"bookingId": "99999999999999999999"}, None),
        ({"bookingId": 12.0}, None),
        ({"bookingId": ["12"]}, None),
        ({}, None),
        (["bookingId", "12"], None),
        ("12", None),
        (None, None),
    ],
)
def test_extract_booking_id(metadata, expected):
    assert extract_booking_id({"metadata": metadata}) == expected


def test_extract_booking_id_from_non_mapping_object():
    assert extract_booking_id(["metadata"]) is None
    assert extract_booking_id("pi_123") is None
    assert extract_booking_id(None) is None


def _signed_raw(event: dict) -> tuple:
    payload = json.dumps(event).encode("utf-8")
    return payload, sign_payload(payload)


@pytest.mark.parametrize(
    "data",
    [
        ["not", "a", "mapping"],
        "pi_123",
        {"object": ["pi_123"]},
        {"object": "pi_123"},
        {"object": {"id": "pi_123", "metadata": ["bookingId", "1"]}},
        {"object": {"id": "pi_123", "metadata": {"bookingId": "²"}}},
    ],
)
def test_malformed_event_shapes_are_acknowledged(db, make_booking, reconciler, data):
    booking = make_booking()
    payload, signature = _signed_raw(
        {"id": "evt_odd", "type": "payment_intent.succeeded", "data": data}
    )

    result = reconciler.handle_gateway_event(payload, signature)

    assert result["status"] == "ignored"
    assert reload_ledger(db).status == "ignored"
    assert reload(db, booking.id).payment_status == "pending"
    assert db.query(EarningsRecord).count() == 0


def test_refund_with_malformed_fields_is_acknowledged(db, make_booking, reconciler):
    booking = make_booking()
    deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), "evt_paid")
    charge = {"id": "ch_odd", "payment_intent": {"id": "pi_test_1"}, "metadata": "bookingId=1"}

    result = deliver(reconciler, "charge.refunded", charge, "evt_refund_odd")

    assert result["status"] == "ignored"
    assert reload(db, booking.id).payment_status == "paid"


def test_refund_flag_must_be_a_real_boolean(db, make_booking, reconciler):
    booking = make_booking()
    deliver(reconciler, "payment_intent.succeeded", intent_object(booking.id), "evt_paid")
    charge = refund_object(booking.id)
    charge["refunded"] = "false"

    result = deliver(reconciler, "charge.refunded", charge, "evt_refund_str")

    assert result["status"] == "ignored"
    assert reload(db, booking.id).payment_status == "paid"
    assert reload(db, booking.id).status == "confirmed"


def test_failure_with_malformed_error_details_is_applied(db, make_booking, reconciler):
    booking = make_booking()
    intent = intent_object(booking.id, status="requires_payment_method")
    intent["last_payment_error"] = "card_declined"
    intent["id"] = 42

    result = deliver(reconciler, "payment_intent.payment_failed", intent)

    assert result["status"] == "processed"
    assert reload(db, booking.id).payment_status == "failed"
