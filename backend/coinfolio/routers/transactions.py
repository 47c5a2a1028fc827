"""Transaction log API router."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from coinfolio.constants import TransactionType
from coinfolio.database import get_db
from coinfolio.dependencies.auth import get_owner_context
from coinfolio.models import Transaction
from coinfolio.schemas import Transaction as TransactionSchema
from coinfolio.schemas import TransactionCreate
from coinfolio.services.portfolio import BuyEvent, OwnerContext, SellEvent, SwapEvent, TransactionLog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.get("", response_model=list[TransactionSchema])
def list_transactions(
    limit: int | None = Query(None, ge=1, le=1000, description="Maximum number of entries"),
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> list[Transaction]:
    """Get the caller's transaction log, newest first."""
    return list(TransactionLog(db).list_for_owner(owner, limit=limit))


@router.post("", response_model=TransactionSchema, status_code=status.HTTP_201_CREATED)
def create_transaction(
    data: TransactionCreate,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> Transaction:
    """
    Append a manual entry to the log.

    The holdings ledger is not touched; use the holdings endpoints to change
    positions.
    """
    asset_id = data.asset_id.strip()
    currency = data.quote_currency.strip().lower() if data.quote_currency else None

    if data.type == TransactionType.SWAP:
        event = SwapEvent(
            from_asset_id=asset_id,
            to_asset_id=data.counter_asset_id.strip(),
            from_amount=data.amount,
            to_amount=data.counter_amount,
            from_price=data.price,
            to_price=data.counter_price,
            quote_currency=currency,
            note=data.note,
        )
    elif data.type == TransactionType.SELL:
        event = SellEvent(asset_id, data.amount, data.price, currency, data.note)
    else:
        event = BuyEvent(asset_id, data.amount, data.price, currency, data.note)

    return TransactionLog(db).append(owner, event)
