"""WeddingLens backend: photographer bookings, payment reconciliation and earnings."""

__version__ = "0.1.0"
