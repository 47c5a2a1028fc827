"""Holdings API router: ledger CRUD, valuation, swap and sell."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from coinfolio.config import settings
from coinfolio.constants import HoldingSortKey
from coinfolio.database import get_db
from coinfolio.dependencies.auth import get_owner_context
from coinfolio.dependencies.market import get_price_oracle
from coinfolio.models import Holding
from coinfolio.schemas import Holding as HoldingSchema
from coinfolio.schemas import (
    HoldingCreate,
    HoldingDeleteResponse,
    HoldingUpdate,
    PortfolioValuationResponse,
    SellRequest,
    SellResponse,
    SwapRequest,
    SwapResponse,
)
from coinfolio.services.coingecko_client import CoinGeckoClient
from coinfolio.services.portfolio import (
    HoldingsLedger,
    LedgerValidationError,
    OwnerContext,
    PortfolioValuationService,
    SwapService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/holdings", tags=["holdings"])


@router.get("", response_model=list[HoldingSchema])
def list_holdings(
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> list[Holding]:
    """Get the caller's holdings, newest first."""
    return HoldingsLedger(db).list_holdings(owner)


@router.post("", response_model=HoldingSchema, status_code=status.HTTP_201_CREATED)
def create_holding(
    data: HoldingCreate,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> Holding:
    """Add a position. A buy entry is appended to the transaction log."""
    return HoldingsLedger(db).create_holding(
        owner,
        data.asset_id,
        data.quantity,
        cost_basis_price=data.cost_basis_price,
        acquired_on=data.acquired_on,
        note=data.note,
    )


# Fixed paths must be registered before /{holding_id}


@router.get("/valuation", response_model=PortfolioValuationResponse)
def get_valuation(
    quote_currency: str | None = Query(None, max_length=10, description="Currency to value in (default usd)"),
    sort_by: str = Query(HoldingSortKey.VALUE, description=f"One of: {', '.join(HoldingSortKey.ALL)}"),
    descending: bool = Query(True),
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
    oracle: CoinGeckoClient = Depends(get_price_oracle),
) -> dict:
    """
    Value the caller's holdings at current prices.

    Query Parameters:
        - quote_currency: Currency for prices and totals
        - sort_by: asset_id, quantity, purchase_price, current_price, value, pnl or date
        - descending: Sort direction; rows without a value always sort last when descending

    If the price oracle is down the rows are returned without prices.
    """
    if sort_by not in HoldingSortKey.ALL:
        raise LedgerValidationError(f"sort_by must be one of: {', '.join(HoldingSortKey.ALL)}")

    currency = (quote_currency or settings.default_quote_currency).strip().lower()
    rows, totals = PortfolioValuationService(db, oracle).value_portfolio(owner, currency, sort_by, descending)
    return {
        "quote_currency": currency,
        "sort_by": sort_by,
        "descending": descending,
        "holdings": rows,
        "totals": totals,
    }


@router.post("/swap", response_model=SwapResponse)
def swap_holding(
    data: SwapRequest,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
    oracle: CoinGeckoClient = Depends(get_price_oracle),
) -> dict:
    """Swap part of one holding into another coin at current spot prices."""
    result = SwapService(db, oracle).swap(
        owner,
        data.from_asset_id,
        data.to_asset_id,
        data.amount,
        data.quote_currency,
    )
    return {
        "holdings": result.holdings,
        "received_amount": result.received_amount,
        "from_price": result.from_price,
        "to_price": result.to_price,
    }


@router.post("/sell", response_model=SellResponse)
def sell_holding(
    data: SellRequest,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> dict:
    """Reduce a holding; selling the whole quantity removes it."""
    result = SwapService(db).sell(
        owner,
        data.asset_id,
        data.amount,
        price=data.price,
        quote_currency=data.quote_currency,
    )
    return {
        "asset_id": result.asset_id,
        "remaining_quantity": result.remaining_quantity,
        "deleted": result.deleted,
    }


@router.put("/by-asset/{asset_id}", response_model=HoldingSchema)
def update_holding_by_asset(
    asset_id: str,
    data: HoldingUpdate,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> Holding:
    """Update the caller's holding for a coin. Only fields in the body change."""
    return HoldingsLedger(db).update_holding_by_asset(owner, asset_id, data.model_dump(exclude_unset=True))


@router.delete("/by-asset/{asset_id}", response_model=HoldingDeleteResponse)
def delete_holding_by_asset(
    asset_id: str,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> dict:
    """Delete every row the caller holds for a coin."""
    return {"deleted": HoldingsLedger(db).delete_holding_by_asset(owner, asset_id)}


@router.get("/{holding_id}", response_model=HoldingSchema)
def get_holding(
    holding_id: int,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> Holding:
    return HoldingsLedger(db).get_holding_by_id(owner, holding_id)


@router.put("/{holding_id}", response_model=HoldingSchema)
def update_holding(
    holding_id: int,
    data: HoldingUpdate,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> Holding:
    """Update a holding. Only fields in the body change; null clears optional fields."""
    return HoldingsLedger(db).update_holding(owner, holding_id, data.model_dump(exclude_unset=True))


@router.delete("/{holding_id}", response_model=HoldingDeleteResponse)
def delete_holding(
    holding_id: int,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> dict:
    return {"deleted": HoldingsLedger(db).delete_holding(owner, holding_id)}
