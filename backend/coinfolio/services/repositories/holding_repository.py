"""Holding data access layer.

Centralizes all Holding queries. Every lookup is keyed on the owner, so a
caller can never read or mutate another user's rows through this class.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from coinfolio.models import Holding

from .exceptions import ForbiddenError, NotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"asset_id", "quantity", "cost_basis_price", "acquired_on", "note"})


class HoldingRepository:
    """Centralized holding data access.

    Naming conventions:
    - find_* : Query that may return None
    - get_* : Query that raises NotFoundError if missing
    - create_* : Insert new record
    - update_* : Modify existing record
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, holding_id: int) -> Holding | None:
        """Find holding by primary key, regardless of owner."""
        return self._db.query(Holding).filter(Holding.id == holding_id).first()

    def get_owned(self, owner_id: str, holding_id: int) -> Holding:
        """Get a holding by id, checking it belongs to owner_id.

        Raises:
            NotFoundError: No holding with that id exists.
            ForbiddenError: The holding exists but belongs to someone else.
        """
        holding = self.find_by_id(holding_id)
        if holding is None:
            raise NotFoundError("Holding", holding_id)
        if holding.owner_id != owner_id:
            raise ForbiddenError("Holding", holding_id)
        return holding

    def find_by_owner_and_asset(
        self, owner_id: str, asset_id: str, *, for_update: bool = False
    ) -> Holding | None:
        """Find the owner's holding for an asset.

        When duplicate rows exist the oldest one wins. With for_update=True the
        row is locked until the surrounding transaction ends.
        """
        query = (
            self._db.query(Holding)
            .filter(Holding.owner_id == owner_id, Holding.asset_id == asset_id)
            .order_by(Holding.id)
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def find_all_by_owner_and_asset(self, owner_id: str, asset_id: str) -> "Sequence[Holding]":
        """Find every row the owner holds for an asset (duplicates included)."""
        return (
            self._db.query(Holding)
            .filter(Holding.owner_id == owner_id, Holding.asset_id == asset_id)
            .order_by(Holding.id)
            .all()
        )

    def list_by_owner(self, owner_id: str) -> "Sequence[Holding]":
        """List the owner's holdings, newest first."""
        return (
            self._db.query(Holding)
            .filter(Holding.owner_id == owner_id)
            .order_by(Holding.created_at.desc(), Holding.id.desc())
            .all()
        )

    def create(
        self,
        owner_id: str,
        asset_id: str,
        quantity: Decimal,
        *,
        cost_basis_price: Decimal | None = None,
        acquired_on: date | None = None,
        note: str | None = None,
    ) -> Holding:
        """Insert a new holding row."""
        holding = Holding(
            owner_id=owner_id,
            asset_id=asset_id,
            quantity=quantity,
            cost_basis_price=cost_basis_price,
            acquired_on=acquired_on,
            note=note,
        )
        self._db.add(holding)
        self._db.flush()
        logger.debug(f"Created holding {holding.id} for owner {owner_id}, asset {asset_id}")
        return holding

    def update_fields(self, holding: Holding, changes: dict[str, Any]) -> Holding:
        """Apply a partial update. Unknown fields are rejected."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update holding fields: {', '.join(sorted(unknown))}")
        for field, value in changes.items():
            setattr(holding, field, value)
        self._db.flush()
        return holding

    def delete(self, holding: Holding) -> None:
        """Delete a holding row."""
        self._db.delete(holding)
        self._db.flush()

    def adjust_quantity(self, owner_id: str, asset_id: str, delta: Decimal) -> Holding | None:
        """Add delta to the owner's holding for asset_id.

        A resulting quantity of zero or below deletes the row (exact comparison,
        no epsilon). The row is locked for the rest of the transaction.

        Returns:
            The updated holding, or None if the row was deleted.

        Raises:
            NotFoundError: The owner holds no row for asset_id.
        """
        holding = self.find_by_owner_and_asset(owner_id, asset_id, for_update=True)
        if holding is None:
            raise NotFoundError("Holding", asset_id)

        remaining = holding.quantity + delta
        if remaining <= 0:
            logger.debug(f"Holding {holding.id} ({asset_id}) drained, deleting")
            self.delete(holding)
            return None

        holding.quantity = remaining
        self._db.flush()
        return holding
