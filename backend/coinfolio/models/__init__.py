"""SQLAlchemy ORM models."""

from coinfolio.models.holding import Holding
from coinfolio.models.transaction import Transaction
from coinfolio.models.user import User
from coinfolio.models.watchlist_item import WatchlistItem

__all__ = [
    "Holding",
    "Transaction",
    "User",
    "WatchlistItem",
]
