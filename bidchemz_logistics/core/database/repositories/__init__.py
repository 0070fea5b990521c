"""
Repositories over the marketplace tables.

Each repository wraps one aggregate. Repositories flush but never commit.
"""

from .base import AsyncBaseRepository, AsyncQueryBuilder, SQLModelRepository
from .offers import OfferRepository
from .quotes import QuoteRepository
from .shipments import ShipmentRepository
from .users import UserRepository
from .wallets import LeadWalletRepository

__all__ = [
    "AsyncBaseRepository",
    "AsyncQueryBuilder",
    "LeadWalletRepository",
    "OfferRepository",
    "QuoteRepository",
    "SQLModelRepository",
    "ShipmentRepository",
    "UserRepository",
]
