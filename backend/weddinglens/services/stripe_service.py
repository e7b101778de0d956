# backend/weddinglens/services/stripe_service.py
"""
Stripe payment intents for WeddingLens bookings.

``StripeGateway`` is the only code that talks to the Stripe API. It is
wrapped behind the small ``PaymentGateway`` protocol so tests and local
development can swap in a fake.

``StripeService`` opens (or reopens) the intent for a booking. The gateway
call is made outside any database transaction; the booking is updated only
after the gateway has answered, so a gateway outage leaves it untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import logging
from typing import Any, Dict, Optional, Protocol

from sqlalchemy.orm import Session
import stripe

from ..core.config import settings
from ..core.exceptions import (
    BusinessRuleException,
    NotFoundException,
    PaymentGatewayException,
    ValidationException,
)
from ..models.booking import BookingStatus, PaymentStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .booking_service import BookingService
from .pricing_service import quantize_money, to_minor_units

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayIntent:
    id: str
    client_secret: str
    status: Optional[str] = None


class PaymentGateway(Protocol):
    def create_payment_intent(
        self,
        amount_minor: int,
        currency: str,
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> GatewayIntent:
        ...


class StripeGateway:
    """PaymentGateway backed by the Stripe API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        timeout_seconds: Optional[int] = None,
        max_network_retries: Optional[int] = None,
    ):
        key = api_key if api_key is not None else settings.stripe_secret_key.get_secret_value()
        self.configured = bool(key)
        if self.configured:
            stripe.api_key = key
            # Bounded timeout so a slow gateway cannot hang the request path
            stripe.default_http_client = stripe.RequestsClient(
                timeout=timeout_seconds or settings.stripe_timeout_seconds
            )
            stripe.max_network_retries = (
                max_network_retries
                if max_network_retries is not None
                else settings.stripe_max_network_retries
            )
            logger.info("Stripe gateway configured")
        else:
            logger.warning("Stripe secret key not configured - payment intents are disabled")

    def create_payment_intent(
        self,
        amount_minor: int,
        currency: str,
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> GatewayIntent:
        if not self.configured:
            raise PaymentGatewayException(
                "Payment gateway is not configured", code="GATEWAY_NOT_CONFIGURED"
            )
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor,
                currency=currency,
                metadata=metadata,
                automatic_payment_methods={"enabled": True},
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating payment intent: {str(e)}")
            raise PaymentGatewayException(
                f"Payment gateway error: {getattr(e, 'user_message', None) or str(e)}",
                code="GATEWAY_ERROR",
                details={"gateway_code": getattr(e, "code", None)},
            ) from e
        return GatewayIntent(id=intent.id, client_secret=intent.client_secret, status=intent.status)


class StripeService(BaseService):
    """Creates payment intents for bookings."""

    def __init__(
        self,
        db: Session,
        gateway: PaymentGateway,
        booking_service: Optional[BookingService] = None,
    ):
        super().__init__(db)
        self.gateway = gateway
        self.booking_service = booking_service or BookingService(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("create_payment_intent")
    def create_intent(self, booking_id: int, amount: Optional[Decimal] = None) -> Dict[str, Any]:
        """
        Open a payment intent for an unpaid booking.

        The stored booking total is what gets charged; a differing ``amount``
        from the caller is logged as suspicious and otherwise ignored. Calling
        again for the same unpaid booking yields a usable client secret and
        replaces the stored intent reference.

        Raises:
            NotFoundException: Unknown booking
            BusinessRuleException: Booking cancelled, already paid or refunded
            PaymentGatewayException: The gateway call failed; booking unchanged
        """
        booking = self.booking_repository.get_by_id(booking_id, load_relationships=False)
        if not booking:
            raise NotFoundException(
                f"Booking {booking_id} not found", details={"booking_id": booking_id}
            )
        if booking.status == BookingStatus.CANCELLED.value:
            raise BusinessRuleException(
                "Cannot take payment for a cancelled booking", code="BOOKING_CANCELLED"
            )
        if booking.payment_status in (PaymentStatus.PAID.value, PaymentStatus.REFUNDED.value):
            raise BusinessRuleException(
                f"Booking payment is already {booking.payment_status}",
                code="ALREADY_PAID",
                details={"payment_status": booking.payment_status},
            )

        total = quantize_money(booking.total_amount)
        if amount is not None:
            requested = quantize_money(amount)
            if requested <= 0:
                raise ValidationException("Amount must be positive")
            if requested != total:
                self.logger.warning(
                    "Payment amount mismatch for booking %s: requested %s, stored %s",
                    booking_id,
                    requested,
                    total,
                    extra={"booking_id": booking_id},
                )

        amount_minor = to_minor_units(total)
        currency = settings.stripe_currency
        try:
            intent = self.gateway.create_payment_intent(
                amount_minor,
                currency,
                {"bookingId": str(booking.id)},
                idempotency_key=self._idempotency_key(
                    booking.id, amount_minor, booking.payment_intent_id
                ),
            )
        except PaymentGatewayException:
            prometheus_metrics.inc_payment_intent("error")
            raise
        except Exception as e:
            prometheus_metrics.inc_payment_intent("error")
            self.logger.error(f"Unexpected gateway failure for booking {booking_id}: {str(e)}")
            raise PaymentGatewayException(
                "Payment gateway unavailable", code="GATEWAY_ERROR"
            ) from e

        self.booking_service.update_payment_status(booking.id, PaymentStatus.PENDING, intent.id)
        prometheus_metrics.inc_payment_intent("success")
        self.log_operation(
            "create_payment_intent",
            booking_id=booking.id,
            payment_intent_id=intent.id,
            amount_minor=amount_minor,
        )
        return {
            "client_secret": intent.client_secret,
            "payment_intent_id": intent.id,
            "amount": total,
            "currency": currency,
        }

    @staticmethod
    def _idempotency_key(booking_id: int, amount_minor: int, replaces: Optional[str]) -> str:
        # A concurrent double submit shares a key; a later attempt replaces the stored intent.
        return f"booking-{booking_id}-intent-{amount_minor}-after-{replaces or 'none'}"
