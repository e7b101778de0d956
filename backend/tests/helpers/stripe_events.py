"""Builders for Stripe webhook bodies and signature headers."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

TEST_WEBHOOK_SECRET = "whsec_test_secret"


def stripe_event(event_type: str, obj: Dict[str, Any], event_id: str = "evt_test_1") -> bytes:
    return json.dumps(
        {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "created": int(time.time()),
            "data": {"object": obj},
        }
    ).encode("utf-8")


def intent_object(
    booking_id: Any,
    amount_minor: int = 199999,
    intent_id: str = "pi_test_1",
    status: str = "succeeded",
) -> Dict[str, Any]:
    return {
        "id": intent_id,
        "object": "payment_intent",
        "amount": amount_minor,
        "amount_received": amount_minor if status == "succeeded" else 0,
        "currency": "inr",
        "status": status,
        "metadata": {"bookingId": str(booking_id)},
    }


def refund_object(
    booking_id: Optional[int],
    intent_id: str = "pi_test_1",
    amount_minor: int = 199999,
    amount_refunded: Optional[int] = None,
) -> Dict[str, Any]:
    refunded = amount_minor if amount_refunded is None else amount_refunded
    return {
        "id": "ch_test_1",
        "object": "charge",
        "amount": amount_minor,
        "amount_refunded": refunded,
        "refunded": refunded >= amount_minor,
        "payment_intent": intent_id,
        "metadata": {"bookingId": str(booking_id)} if booking_id is not None else {},
    }


def sign_payload(
    payload: bytes, secret: str = TEST_WEBHOOK_SECRET, timestamp: Optional[int] = None
) -> str:
    """Stripe-Signature header value for ``payload``."""
    ts = timestamp if timestamp is not None else int(time.time())
    signed = f"{ts}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={signature}"
