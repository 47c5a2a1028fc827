"""Schemas for the portfolio valuation view."""

import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class HoldingValuation(BaseModel):
    """One valued ledger row. Price-dependent fields are null when no price is known."""

    model_config = ConfigDict(from_attributes=True)

    holding_id: int
    asset_id: str
    quantity: Decimal
    cost_basis_price: Decimal | None = None
    acquired_on: datetime.date | None = None
    note: str | None = None
    current_price: Decimal | None = None
    current_value: Decimal | None = None
    cost_basis: Decimal | None = None
    pnl: Decimal | None = None
    pnl_percent: Decimal | None = None


class PortfolioTotals(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_value: Decimal
    total_cost_basis: Decimal
    total_pnl: Decimal
    total_pnl_percent: Decimal | None = None
    holding_count: int


class PortfolioValuationResponse(BaseModel):
    quote_currency: str
    sort_by: str
    descending: bool
    holdings: list[HoldingValuation]
    totals: PortfolioTotals
