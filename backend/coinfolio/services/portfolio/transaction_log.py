"""Transaction log - best-effort audit trail of ledger events.

Records are written after the ledger change they describe has committed,
in their own unit of work. A failed write is logged and dropped; it never
undoes or fails the ledger change.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from coinfolio.constants import TransactionType
from coinfolio.models import Transaction
from coinfolio.services.portfolio.amounts import WORKING_PRECISION, quantize_price, quantize_quantity
from coinfolio.services.portfolio.exceptions import LedgerValidationError
from coinfolio.services.portfolio.valuation_types import OwnerContext
from coinfolio.services.repositories import TransactionRepository

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuyEvent:
    asset_id: str
    amount: Decimal
    price: Decimal | None = None
    quote_currency: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class SellEvent:
    asset_id: str
    amount: Decimal
    price: Decimal | None = None
    quote_currency: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class SwapEvent:
    from_asset_id: str
    to_asset_id: str
    from_amount: Decimal
    to_amount: Decimal
    from_price: Decimal
    to_price: Decimal
    quote_currency: str
    note: str | None = None


LedgerEvent = BuyEvent | SellEvent | SwapEvent


def _total(amount: Decimal, price: Decimal | None) -> Decimal | None:
    if price is None:
        return None
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        return quantize_price(amount * price)


def build_transaction(owner: OwnerContext, event: LedgerEvent) -> Transaction:
    """Map an event onto a Transaction row (not yet persisted)."""
    if isinstance(event, SwapEvent):
        return Transaction(
            owner_id=owner.owner_id,
            type=TransactionType.SWAP,
            asset_id=event.from_asset_id,
            amount=quantize_quantity(event.from_amount),
            price=quantize_price(event.from_price),
            quote_currency=event.quote_currency,
            total_value=_total(event.from_amount, event.from_price),
            counter_asset_id=event.to_asset_id,
            counter_amount=quantize_quantity(event.to_amount),
            counter_price=quantize_price(event.to_price),
            note=event.note,
        )
    if isinstance(event, BuyEvent | SellEvent):
        return Transaction(
            owner_id=owner.owner_id,
            type=TransactionType.BUY if isinstance(event, BuyEvent) else TransactionType.SELL,
            asset_id=event.asset_id,
            amount=quantize_quantity(event.amount),
            price=quantize_price(event.price),
            quote_currency=event.quote_currency,
            total_value=_total(event.amount, event.price),
            note=event.note,
        )
    raise LedgerValidationError(f"Unsupported transaction event: {type(event).__name__}")


class TransactionLog:
    """Append-only log of buy, sell and swap events for one session."""

    def __init__(self, db: Session) -> None:
        self._db = db
        self._repo = TransactionRepository(db)

    def record(self, owner: OwnerContext, event: LedgerEvent) -> Transaction | None:
        """Append and commit a record of event.

        Fire-and-forget: any failure rolls the session back, is logged with
        its traceback and results in None.
        """
        try:
            transaction = self._repo.append(build_transaction(owner, event))
            self._db.commit()
        except Exception:
            self._db.rollback()
            logger.exception(f"Failed to record {type(event).__name__} for owner {owner.owner_id}")
            return None
        logger.info(f"Recorded {transaction.type} transaction {transaction.id} for owner {owner.owner_id}")
        return transaction

    def append(self, owner: OwnerContext, event: LedgerEvent) -> Transaction:
        """Append and commit a record of event, propagating any failure.

        Used for manual entries where the caller needs to know the write landed.
        """
        transaction = self._repo.append(build_transaction(owner, event))
        self._db.commit()
        logger.info(f"Appended {transaction.type} transaction {transaction.id} for owner {owner.owner_id}")
        return transaction

    def list_for_owner(self, owner: OwnerContext, limit: int | None = None) -> "Sequence[Transaction]":
        """List the owner's transactions, newest first."""
        return self._repo.list_by_owner(owner.owner_id, limit=limit)
