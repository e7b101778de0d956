"""Application-wide constants for the WeddingLens platform."""

from __future__ import annotations

from decimal import Decimal

BRAND_NAME = "WeddingLens"

# Money precision (major units, two decimal places)
MONEY_QUANTUM = Decimal("0.01")

# Booking input constraints
MIN_LOCATION_LENGTH = 3
MAX_LOCATION_LENGTH = 255
MAX_CANCELLATION_REASON_LENGTH = 500
MAX_SERVICE_QUANTITY = 10

# Webhook ledger source names
WEBHOOK_SOURCE_STRIPE = "stripe"

# Earnings analytics window
DEFAULT_ANALYTICS_MONTHS = 6
MAX_ANALYTICS_MONTHS = 24

# API metadata
API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = f"Backend API for {BRAND_NAME} - wedding photographer booking and payments"
API_VERSION = "1.0.0"

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]
