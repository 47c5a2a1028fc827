"""Watchlist data access layer."""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from coinfolio.models import WatchlistItem

from .exceptions import DuplicateError, ForbiddenError, NotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class WatchlistRepository:
    """Owner-scoped watchlist access."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def list_by_owner(self, owner_id: str) -> "Sequence[WatchlistItem]":
        """List the owner's watchlist, newest first."""
        return (
            self._db.query(WatchlistItem)
            .filter(WatchlistItem.owner_id == owner_id)
            .order_by(WatchlistItem.added_at.desc(), WatchlistItem.id.desc())
            .all()
        )

    def find_by_owner_and_asset(self, owner_id: str, asset_id: str) -> WatchlistItem | None:
        return (
            self._db.query(WatchlistItem)
            .filter(WatchlistItem.owner_id == owner_id, WatchlistItem.asset_id == asset_id)
            .first()
        )

    def add(
        self,
        owner_id: str,
        asset_id: str,
        *,
        note: str | None = None,
        target_price: Decimal | None = None,
    ) -> WatchlistItem:
        """Add an asset to the owner's watchlist.

        Raises:
            DuplicateError: The asset is already on the watchlist.
        """
        if self.find_by_owner_and_asset(owner_id, asset_id) is not None:
            raise DuplicateError("WatchlistItem", "asset_id", asset_id)

        item = WatchlistItem(
            owner_id=owner_id, asset_id=asset_id, note=note, target_price=target_price
        )
        self._db.add(item)
        self._db.flush()
        return item

    def remove(self, owner_id: str, item_id: int) -> None:
        """Remove a watchlist entry owned by owner_id.

        Raises:
            NotFoundError: No entry with that id.
            ForbiddenError: The entry belongs to someone else.
        """
        item = self._db.query(WatchlistItem).filter(WatchlistItem.id == item_id).first()
        if item is None:
            raise NotFoundError("WatchlistItem", item_id)
        if item.owner_id != owner_id:
            raise ForbiddenError("WatchlistItem", item_id)
        self._db.delete(item)
        self._db.flush()
