# backend/weddinglens/services/payment_webhook_service.py
"""
Payment webhook reconciliation for WeddingLens.

Applies asynchronous Stripe outcomes to bookings:

    payment_intent.processing      payment -> processing
    payment_intent.succeeded       payment -> paid, booking -> confirmed, earnings recorded once
    payment_intent.payment_failed  payment -> failed (booking stays actionable)
    charge.refunded                payment -> refunded, booking -> cancelled, earnings voided

Every event is logged in the webhook ledger first. Redeliveries of an event
that was already handled are acknowledged without touching anything, and
out-of-order events that would need an illegal transition are recorded as
ignored. Storage failures are raised so the gateway retries the delivery.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any, Dict, Mapping, Optional, Tuple

from sqlalchemy.orm import Session
import stripe

from ..core.config import settings
from ..core.constants import WEBHOOK_SOURCE_STRIPE
from ..core.exceptions import (
    DomainException,
    InvalidTransitionException,
    ServiceException,
    UnauthorizedException,
    ValidationException,
)
from ..models.booking import Booking, BookingStatus, PaymentStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .booking_service import BookingService
from .earnings_service import EarningsService
from .pricing_service import to_minor_units
from .webhook_ledger_service import WebhookLedgerService

logger = logging.getLogger(__name__)

Outcome = Tuple[str, Optional[int], Optional[str]]  # (status, booking_id, note)


_MAX_BOOKING_ID = 2**63 - 1


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def extract_booking_id(obj: Mapping[str, Any]) -> Optional[int]:
    """Booking id from gateway object metadata; None when absent or not a positive integer."""
    metadata = _mapping(_mapping(obj).get("metadata"))
    raw = metadata.get("bookingId", metadata.get("booking_id"))
    if isinstance(raw, str):
        digits = raw.strip()
        # ASCII only: str.isdecimal also accepts other scripts' digits.
        if not (digits.isascii() and digits.isdecimal()):
            return None
        value = int(digits)
    elif isinstance(raw, int) and not isinstance(raw, bool):
        value = raw
    else:
        return None
    return value if 0 < value <= _MAX_BOOKING_ID else None


class PaymentWebhookService(BaseService):
    """Verifies, deduplicates and applies payment gateway events."""

    def __init__(
        self,
        db: Session,
        booking_service: Optional[BookingService] = None,
        earnings_service: Optional[EarningsService] = None,
        webhook_secret: Optional[str] = None,
    ):
        super().__init__(db)
        self.booking_service = booking_service or BookingService(db)
        self.earnings_service = earnings_service or EarningsService(db)
        self.ledger = WebhookLedgerService(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.webhook_secret = (
            webhook_secret if webhook_secret is not None else settings.webhook_secret
        )

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    @BaseService.measure_operation("handle_gateway_event")
    def handle_gateway_event(
        self, raw_event: bytes, signature_header: Optional[str]
    ) -> Dict[str, Any]:
        """
        Verify and apply one webhook delivery.

        Returns:
            Acknowledgement dict: ``received``, ``event_type`` and ``status``
            (processed, ignored or duplicate)

        Raises:
            UnauthorizedException: Signature check failed (nothing recorded)
            ValidationException: Body is not a JSON event
            ServiceException: Storage failed while applying the event
        """
        event = self.parse_event(raw_event, signature_header)
        event_type = str(event.get("type") or "unknown")
        event_id = str(event.get("id") or "sha256:" + hashlib.sha256(raw_event).hexdigest())

        with self.transaction():
            ledger_event = self.ledger.log_received(
                source=WEBHOOK_SOURCE_STRIPE,
                event_id=event_id,
                event_type=event_type,
                payload=event,
                headers={"stripe-signature": signature_header} if signature_header else None,
            )
            if self.ledger.is_final(ledger_event):
                self.logger.info(
                    "Duplicate delivery of %s (%s), already %s",
                    event_id,
                    event_type,
                    ledger_event.status,
                )
                prometheus_metrics.inc_gateway_event(event_type, "duplicate")
                return self._ack(event_type, "duplicate")

        started = time.monotonic()
        try:
            with self.transaction():
                status, booking_id, note = self._dispatch(event_type, event)
                self.ledger.mark_processed(
                    ledger_event,
                    status=status,
                    related_booking_id=booking_id,
                    duration_ms=self._elapsed_ms(started),
                    note=note,
                )
        except InvalidTransitionException as exc:
            # Out-of-order or stale event; nothing was applied.
            self.logger.warning("Skipping %s %s: %s", event_type, event_id, exc.message)
            with self.transaction():
                self.ledger.mark_processed(
                    ledger_event,
                    status="ignored",
                    duration_ms=self._elapsed_ms(started),
                    note=exc.message,
                )
            status = "ignored"
        except Exception as exc:
            self.logger.error(f"Failed to apply {event_type} {event_id}: {str(exc)}")
            prometheus_metrics.inc_gateway_event(event_type, "failed")
            with self.transaction():
                self.ledger.mark_failed(
                    ledger_event, error=str(exc), duration_ms=self._elapsed_ms(started)
                )
            if isinstance(exc, DomainException):
                raise
            raise ServiceException(f"Failed to process webhook event {event_id}") from exc

        prometheus_metrics.inc_gateway_event(event_type, status)
        return self._ack(event_type, status)

    def parse_event(self, raw_event: bytes, signature_header: Optional[str]) -> Dict[str, Any]:
        """
        Authenticate and decode a webhook body.

        With a signing secret configured the Stripe signature is mandatory.
        Without one the body is accepted unauthenticated (development only).
        """
        if self.webhook_secret:
            if not signature_header:
                prometheus_metrics.inc_gateway_event("unknown", "rejected")
                raise UnauthorizedException("Missing webhook signature", code="INVALID_SIGNATURE")
            try:
                stripe.Webhook.construct_event(raw_event, signature_header, self.webhook_secret)
            except stripe.SignatureVerificationError as e:
                self.logger.warning(f"Webhook signature verification failed: {str(e)}")
                prometheus_metrics.inc_gateway_event("unknown", "rejected")
                raise UnauthorizedException("Invalid webhook signature", code="INVALID_SIGNATURE")
            except ValueError as e:
                raise ValidationException("Invalid webhook payload") from e
        else:
            self.logger.warning(
                "Stripe webhook secret not configured - accepting unauthenticated event"
            )

        try:
            event = json.loads(raw_event)
        except (TypeError, ValueError) as e:
            raise ValidationException("Invalid webhook payload") from e
        if not isinstance(event, dict):
            raise ValidationException("Invalid webhook payload")
        return event

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _dispatch(self, event_type: str, event: Mapping[str, Any]) -> Outcome:
        obj = _mapping(_mapping(event.get("data")).get("object"))
        if event_type == "payment_intent.succeeded":
            return self._handle_payment_succeeded(obj)
        if event_type == "payment_intent.processing":
            return self._handle_payment_processing(obj)
        if event_type == "payment_intent.payment_failed":
            return self._handle_payment_failed(obj)
        if event_type == "charge.refunded":
            return self._handle_charge_refunded(obj)

        self.logger.info(f"Unhandled webhook event type: {event_type}")
        return "ignored", None, "unhandled event type"

    def _load_booking(self, obj: Mapping[str, Any], event_type: str) -> Tuple[Optional[int], Optional[Booking]]:
        booking_id = extract_booking_id(obj)
        if booking_id is None:
            self.logger.warning(
                "%s without a usable bookingId in metadata (object %s)", event_type, obj.get("id")
            )
            return None, None
        booking = self.booking_repository.get_for_update(booking_id)
        if booking is None:
            # Acked so the gateway stops retrying data that will never exist.
            self.logger.warning("%s for unknown booking %s", event_type, booking_id)
        return booking_id, booking

    def _handle_payment_succeeded(self, intent: Mapping[str, Any]) -> Outcome:
        booking_id, booking = self._load_booking(intent, "payment_intent.succeeded")
        if booking is None:
            return "ignored", booking_id, "booking not found"

        if booking.status == BookingStatus.CANCELLED.value:
            self.logger.error(
                "Payment %s succeeded for cancelled booking %s; refund it manually",
                intent.get("id"),
                booking.id,
            )
            return "ignored", booking.id, "booking cancelled"

        received = intent.get("amount_received", intent.get("amount"))
        if isinstance(received, int) and received != to_minor_units(booking.total_amount):
            self.logger.warning(
                "Booking %s: gateway collected %s minor units, booking total is %s",
                booking.id,
                received,
                booking.total_amount,
            )

        self.booking_service.apply_payment_status(
            booking, PaymentStatus.PAID, _text(intent.get("id"))
        )
        if booking.status == BookingStatus.PENDING.value:
            self.booking_service.apply_status(booking, BookingStatus.CONFIRMED)
        self.booking_repository.flush()

        self.earnings_service.record_earning(booking.id)
        return "processed", booking.id, None

    def _handle_payment_processing(self, intent: Mapping[str, Any]) -> Outcome:
        booking_id, booking = self._load_booking(intent, "payment_intent.processing")
        if booking is None:
            return "ignored", booking_id, "booking not found"
        if booking.status == BookingStatus.CANCELLED.value:
            return "ignored", booking.id, "booking cancelled"

        self.booking_service.apply_payment_status(
            booking, PaymentStatus.PROCESSING, _text(intent.get("id"))
        )
        self.booking_repository.flush()
        return "processed", booking.id, None

    def _handle_payment_failed(self, intent: Mapping[str, Any]) -> Outcome:
        booking_id, booking = self._load_booking(intent, "payment_intent.payment_failed")
        if booking is None:
            return "ignored", booking_id, "booking not found"

        error = _mapping(intent.get("last_payment_error"))
        self.logger.info(
            "Payment failed for booking %s: %s", booking.id, error.get("message", "unknown")
        )
        self.booking_service.apply_payment_status(
            booking, PaymentStatus.FAILED, _text(intent.get("id"))
        )
        self.booking_repository.flush()
        return "processed", booking.id, None

    def _handle_charge_refunded(self, charge: Mapping[str, Any]) -> Outcome:
        booking_id = extract_booking_id(charge)
        if booking_id is not None:
            booking = self.booking_repository.get_for_update(booking_id)
        else:
            intent_id = _text(charge.get("payment_intent"))
            booking = (
                self.booking_repository.find_one_by(payment_intent_id=intent_id)
                if intent_id
                else None
            )
        if booking is None:
            self.logger.warning("charge.refunded for unknown booking (charge %s)", charge.get("id"))
            return "ignored", booking_id, "booking not found"

        if charge.get("refunded") is not True:
            self.logger.info(
                "Partial refund on booking %s (%s of %s); booking left as is",
                booking.id,
                charge.get("amount_refunded"),
                charge.get("amount"),
            )
            return "ignored", booking.id, "partial refund"

        self.booking_service.apply_payment_status(booking, PaymentStatus.REFUNDED)
        if booking.status in (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value):
            self.booking_service.apply_status(booking, BookingStatus.CANCELLED)
            booking.cancellation_reason = booking.cancellation_reason or "refunded"
        self.booking_repository.flush()
        self.earnings_service.cancel_for_booking(booking.id)
        return "processed", booking.id, None

    @staticmethod
    def _ack(event_type: str, status: str) -> Dict[str, Any]:
        return {"received": True, "event_type": event_type, "status": status}

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.monotonic() - started) * 1000)
