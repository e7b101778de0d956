# backend/weddinglens/routes/v1/payments.py
"""
Payment routes - API v1

Endpoints:
    POST /intents          → Open a Stripe payment intent for a booking
    POST /webhooks/stripe  → Receive Stripe events (signature-verified, no auth)
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ...api.dependencies.services import get_payment_webhook_service, get_stripe_service
from ...core.exceptions import DomainException, UnauthorizedException
from ...schemas.payment_schemas import (
    PaymentIntentCreate,
    PaymentIntentResponse,
    WebhookResponse,
)
from ...services.payment_webhook_service import PaymentWebhookService
from ...services.stripe_service import StripeService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["payments-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post(
    "/intents",
    response_model=PaymentIntentResponse,
    responses={
        404: {"description": "Booking not found"},
        422: {"description": "Booking cannot take payment"},
        502: {"description": "Payment gateway error"},
    },
)
async def create_payment_intent(
    payload: PaymentIntentCreate,
    stripe_service: StripeService = Depends(get_stripe_service),
) -> PaymentIntentResponse:
    """Open (or reopen) the payment intent for an unpaid booking."""
    try:
        result = await asyncio.to_thread(
            stripe_service.create_intent, payload.booking_id, payload.amount
        )
        return PaymentIntentResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)


# ========== Webhook Route (No Authentication) ==========


@router.post("/webhooks/stripe", response_model=WebhookResponse)
async def handle_stripe_webhook(
    request: Request,
    webhook_service: PaymentWebhookService = Depends(get_payment_webhook_service),
) -> WebhookResponse:
    """
    Handle Stripe webhook events.

    Returns:
        200 once the event is durably handled (processed, ignored or duplicate)

    Note:
        This endpoint has no authentication as it uses webhook signature verification.
        A bad signature is answered with 400; a storage failure with 500 so Stripe retries.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    try:
        result = await asyncio.to_thread(
            webhook_service.handle_gateway_event, payload, sig_header
        )
    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": e.message, "code": e.code, "details": e.details},
        )
    except DomainException as e:
        handle_domain_exception(e)

    logger.info(f"Webhook {result['event_type']} handled: {result['status']}")
    return WebhookResponse(**result)


__all__ = ["router"]
