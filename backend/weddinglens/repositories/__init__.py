# backend/weddinglens/repositories/__init__.py
"""
Repository layer for WeddingLens.

Data access is kept out of services; services get repositories from
RepositoryFactory.
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .earnings_repository import EarningsRepository
from .factory import RepositoryFactory

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "EarningsRepository",
    "RepositoryFactory",
]
