# backend/weddinglens/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import (
    availability,
    bookings,
    earnings,
    packages,
    payments,
    photographers,
    pricing,
    services,
    testimonials,
)

__all__ = [
    "availability",
    "bookings",
    "earnings",
    "packages",
    "payments",
    "photographers",
    "pricing",
    "services",
    "testimonials",
]
