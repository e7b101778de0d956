"""
Payment-related Pydantic schemas for WeddingLens.

Request and response models for opening Stripe payment intents and for
acknowledging inbound Stripe webhooks.
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel

# ========== Request Models ==========


class PaymentIntentCreate(StrictRequestModel):
    """Request to open a payment intent for a booking."""

    booking_id: int = Field(..., gt=0, description="Booking to take payment for")
    amount: Optional[Decimal] = Field(
        default=None,
        gt=0,
        max_digits=12,
        decimal_places=2,
        description="Amount the client expects to pay; the stored booking total is charged",
    )


# ========== Response Models ==========


class PaymentIntentResponse(StrictModel):
    """Client secret for completing payment in the browser."""

    client_secret: str = Field(..., description="Stripe PaymentIntent client secret")
    payment_intent_id: str = Field(..., description="Stripe PaymentIntent ID")
    amount: Decimal = Field(..., description="Amount charged, in major units")
    currency: str = Field(..., description="ISO currency code")


class WebhookResponse(StrictModel):
    """Response for webhook processing."""

    received: bool = Field(default=True, description="Whether the event was accepted")
    status: str = Field(..., description="processed, ignored or duplicate")
    event_type: Optional[str] = Field(default=None, description="Gateway event type")
    message: Optional[str] = Field(default=None, description="Optional processing note")
