"""Transaction log data access layer."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from coinfolio.models import Transaction

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class TransactionRepository:
    """Append-only access to the transactions table."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def append(self, transaction: Transaction) -> Transaction:
        """Insert a transaction row."""
        self._db.add(transaction)
        self._db.flush()
        return transaction

    def list_by_owner(self, owner_id: str, limit: int | None = None) -> "Sequence[Transaction]":
        """List the owner's transactions, newest first."""
        query = (
            self._db.query(Transaction)
            .filter(Transaction.owner_id == owner_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()
