"""Holdings ledger - owner-scoped CRUD over holding rows.

Validation runs before any write, and every mutating call commits its own
unit of work. A buy record is appended after a position is created, on a
best-effort basis.
"""

import logging
from datetime import date
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coinfolio.models import Holding
from coinfolio.services.portfolio.amounts import (
    non_negative_price,
    quantize_price,
    quantize_quantity,
    stored_quantity,
    to_decimal,
)
from coinfolio.services.portfolio.exceptions import LedgerValidationError
from coinfolio.services.portfolio.transaction_log import BuyEvent, TransactionLog
from coinfolio.services.portfolio.valuation_types import OwnerContext
from coinfolio.services.repositories import HoldingRepository, NotFoundError
from coinfolio.services.repositories.holding_repository import UPDATABLE_FIELDS

logger = logging.getLogger(__name__)


def _clean_asset_id(asset_id: str | None) -> str:
    cleaned = asset_id.strip() if isinstance(asset_id, str) else ""
    if not cleaned:
        raise LedgerValidationError("asset_id is required")
    return cleaned


class HoldingsLedger:
    """Owner-scoped operations on the holdings table.

    Usage:
        ledger = HoldingsLedger(db)
        holding = ledger.create_holding(owner, "bitcoin", Decimal("0.5"), cost_basis_price=Decimal("42000"))
        ledger.update_holding(owner, holding.id, {"note": "cold wallet"})
    """

    def __init__(self, db: Session, transaction_log: TransactionLog | None = None) -> None:
        self._db = db
        self._repo = HoldingRepository(db)
        self._log = transaction_log or TransactionLog(db)

    def _commit(self) -> None:
        try:
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise

    def list_holdings(self, owner: OwnerContext) -> list[Holding]:
        """All of the owner's holdings, newest first."""
        return list(self._repo.list_by_owner(owner.owner_id))

    def get_holding(self, owner: OwnerContext, asset_id: str) -> Holding | None:
        """The owner's (oldest) holding for asset_id, or None."""
        return self._repo.find_by_owner_and_asset(owner.owner_id, asset_id.strip())

    def get_holding_by_id(self, owner: OwnerContext, holding_id: int) -> Holding:
        """Get one holding by id.

        Raises:
            NotFoundError: No such holding
            ForbiddenError: The holding belongs to another owner
        """
        return self._repo.get_owned(owner.owner_id, holding_id)

    def create_holding(
        self,
        owner: OwnerContext,
        asset_id: str,
        quantity,
        cost_basis_price=None,
        acquired_on: date | None = None,
        note: str | None = None,
    ) -> Holding:
        """Add a position to the owner's ledger.

        Raises:
            LedgerValidationError: Blank asset, non-positive or non-finite
                quantity, negative price
        """
        asset_id = _clean_asset_id(asset_id)
        amount = stored_quantity(quantity, "quantity")
        price = non_negative_price(cost_basis_price, "cost_basis_price")

        try:
            holding = self._repo.create(
                owner.owner_id,
                asset_id,
                amount,
                cost_basis_price=quantize_price(price),
                acquired_on=acquired_on,
                note=note,
            )
        except SQLAlchemyError:
            self._db.rollback()
            raise
        self._commit()
        logger.info(f"Owner {owner.owner_id} added holding {holding.id}: {amount} {asset_id}")

        self._log.record(owner, BuyEvent(asset_id=asset_id, amount=amount, price=price, note=note))
        return holding

    def _validate_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        if not changes:
            raise LedgerValidationError("No fields to update")
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise LedgerValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        cleaned = dict(changes)
        if "asset_id" in cleaned:
            cleaned["asset_id"] = _clean_asset_id(cleaned["asset_id"])
        if "quantity" in cleaned:
            if cleaned["quantity"] is None:
                raise LedgerValidationError("quantity cannot be cleared")
            cleaned["quantity"] = stored_quantity(cleaned["quantity"], "quantity")
        if "cost_basis_price" in cleaned:
            cleaned["cost_basis_price"] = quantize_price(
                non_negative_price(cleaned["cost_basis_price"], "cost_basis_price")
            )
        return cleaned

    def _apply_update(self, owner: OwnerContext, holding: Holding, changes: dict[str, Any]) -> Holding:
        try:
            self._repo.update_fields(holding, changes)
        except SQLAlchemyError:
            self._db.rollback()
            raise
        self._commit()
        logger.info(f"Owner {owner.owner_id} updated holding {holding.id}: {', '.join(sorted(changes))}")
        return holding

    def update_holding(self, owner: OwnerContext, holding_id: int, changes: dict[str, Any]) -> Holding:
        """Apply a partial update to a holding by id.

        Only keys present in changes are written; an explicit None clears a
        nullable field.

        Raises:
            LedgerValidationError: Empty change set or invalid values
            NotFoundError / ForbiddenError: As for get_holding_by_id
        """
        cleaned = self._validate_changes(changes)
        holding = self._repo.get_owned(owner.owner_id, holding_id)
        return self._apply_update(owner, holding, cleaned)

    def update_holding_by_asset(self, owner: OwnerContext, asset_id: str, changes: dict[str, Any]) -> Holding:
        """Apply a partial update to the owner's (oldest) holding for asset_id."""
        cleaned = self._validate_changes(changes)
        holding = self._repo.find_by_owner_and_asset(owner.owner_id, asset_id.strip())
        if holding is None:
            raise NotFoundError("Holding", asset_id)
        return self._apply_update(owner, holding, cleaned)

    def delete_holding(self, owner: OwnerContext, holding_id: int) -> int:
        """Delete one holding by id. Returns the number of rows removed (1)."""
        holding = self._repo.get_owned(owner.owner_id, holding_id)
        try:
            self._repo.delete(holding)
        except SQLAlchemyError:
            self._db.rollback()
            raise
        self._commit()
        logger.info(f"Owner {owner.owner_id} deleted holding {holding_id}")
        return 1

    def delete_holding_by_asset(self, owner: OwnerContext, asset_id: str) -> int:
        """Delete every row the owner holds for asset_id.

        Raises:
            NotFoundError: The owner holds nothing for asset_id
        """
        asset_id = asset_id.strip()
        rows = self._repo.find_all_by_owner_and_asset(owner.owner_id, asset_id)
        if not rows:
            raise NotFoundError("Holding", asset_id)
        try:
            for holding in rows:
                self._repo.delete(holding)
        except SQLAlchemyError:
            self._db.rollback()
            raise
        self._commit()
        logger.info(f"Owner {owner.owner_id} deleted {len(rows)} holding(s) for {asset_id}")
        return len(rows)

    def adjust_quantity(self, owner: OwnerContext, asset_id: str, delta) -> Holding | None:
        """Add delta to the owner's holding and commit.

        Returns:
            The updated holding, or None when the row was drained and deleted
        """
        delta = quantize_quantity(to_decimal(delta, "delta"))
        try:
            holding = self._repo.adjust_quantity(owner.owner_id, asset_id.strip(), delta)
        except SQLAlchemyError:
            self._db.rollback()
            raise
        self._commit()
        return holding
