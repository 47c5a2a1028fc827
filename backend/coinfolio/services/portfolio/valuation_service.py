"""Portfolio valuation - single source of truth for value calculations.

valuate, summarize and sort_valuations are pure functions of (holdings,
prices), so the same inputs always produce the same rows and totals.
PortfolioValuationService wires them to the ledger and the price oracle.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from decimal import Decimal, localcontext
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from coinfolio.config import settings
from coinfolio.constants import HoldingSortKey
from coinfolio.models import Holding
from coinfolio.services.coingecko_client import OracleUnavailableError
from coinfolio.services.portfolio.amounts import WORKING_PRECISION
from coinfolio.services.portfolio.valuation_types import HoldingValuation, OwnerContext, PortfolioTotals
from coinfolio.services.repositories import HoldingRepository

if TYPE_CHECKING:
    from coinfolio.services.portfolio.swap_service import PriceOracle

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def valuate_holding(holding: Holding, price: Decimal | None) -> HoldingValuation:
    """Calculate value, cost basis and P&L for a single holding.

    Args:
        holding: The ledger row
        price: Current per-unit price, or None when the oracle has none

    Returns:
        HoldingValuation; fields that depend on a missing price or cost
        basis are None
    """
    quantity = Decimal(holding.quantity)
    cost_price = Decimal(holding.cost_basis_price) if holding.cost_basis_price is not None else None

    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        current_value = quantity * price if price is not None else None
        cost_basis = quantity * cost_price if cost_price is not None else None

        if current_value is not None and cost_basis is not None:
            pnl = current_value - cost_basis
            pnl_percent = pnl / cost_basis * HUNDRED if cost_basis > 0 else None
        else:
            pnl = None
            pnl_percent = None

    return HoldingValuation(
        holding_id=holding.id,
        asset_id=holding.asset_id,
        quantity=quantity,
        cost_basis_price=cost_price,
        acquired_on=holding.acquired_on,
        created_at=holding.created_at,
        note=holding.note,
        current_price=price,
        current_value=current_value,
        cost_basis=cost_basis,
        pnl=pnl,
        pnl_percent=pnl_percent,
    )


def valuate(holdings: Iterable[Holding], prices: Mapping[str, Decimal]) -> list[HoldingValuation]:
    """Value every holding against a price map keyed by asset id."""
    return [valuate_holding(h, prices.get(h.asset_id)) for h in holdings]


def summarize(valuations: Sequence[HoldingValuation]) -> PortfolioTotals:
    """Sum value, cost basis and P&L over all rows.

    total_pnl is the sum of row P&L, so a row without a price contributes
    its cost basis to total_cost_basis but nothing to total_pnl.
    """
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        total_value = sum((v.current_value or ZERO for v in valuations), ZERO)
        total_cost = sum((v.cost_basis or ZERO for v in valuations), ZERO)
        total_pnl = sum((v.pnl or ZERO for v in valuations), ZERO)
        total_pnl_percent = total_pnl / total_cost * HUNDRED if total_cost > 0 else None

    return PortfolioTotals(
        total_value=total_value,
        total_cost_basis=total_cost,
        total_pnl=total_pnl,
        total_pnl_percent=total_pnl_percent,
        holding_count=len(valuations),
    )


def _date_of(valuation: HoldingValuation):
    if valuation.acquired_on is not None:
        return valuation.acquired_on
    if isinstance(valuation.created_at, datetime):
        return valuation.created_at.date()
    return None


_SORT_FIELDS = {
    HoldingSortKey.ASSET_ID: lambda v: v.asset_id,
    HoldingSortKey.QUANTITY: lambda v: v.quantity,
    HoldingSortKey.PURCHASE_PRICE: lambda v: v.cost_basis_price,
    HoldingSortKey.CURRENT_PRICE: lambda v: v.current_price,
    HoldingSortKey.VALUE: lambda v: v.current_value,
    HoldingSortKey.PNL: lambda v: v.pnl,
    HoldingSortKey.DATE: _date_of,
}


def sort_valuations(
    valuations: Iterable[HoldingValuation],
    key: str = HoldingSortKey.VALUE,
    descending: bool = True,
) -> list[HoldingValuation]:
    """Stable sort of valuation rows.

    Missing values rank below every present value: first when ascending,
    last when descending.

    Raises:
        ValueError: Unknown sort key
    """
    getter = _SORT_FIELDS.get(key)
    if getter is None:
        raise ValueError(f"Unknown sort key '{key}'. Expected one of: {', '.join(HoldingSortKey.ALL)}")

    def sort_key(valuation: HoldingValuation):
        value = getter(valuation)
        return (0, 0) if value is None else (1, value)

    return sorted(valuations, key=sort_key, reverse=descending)


class PortfolioValuationService:
    """Values an owner's ledger at current oracle prices.

    Oracle failure degrades to "no prices": rows keep their cost basis and
    report no value or P&L.
    """

    def __init__(self, db: Session, oracle: "PriceOracle") -> None:
        self._db = db
        self._oracle = oracle
        self._repo = HoldingRepository(db)

    def fetch_prices(self, asset_ids: Iterable[str], quote_currency: str) -> dict[str, Decimal]:
        """Current prices for asset_ids; empty on oracle failure."""
        ids = sorted(set(asset_ids))
        if not ids:
            return {}
        currency = quote_currency.strip().lower()
        try:
            table = self._oracle.get_simple_price(ids, [currency])
        except OracleUnavailableError as e:
            logger.warning(f"Valuing without prices, oracle unavailable: {e}")
            return {}
        return {asset_id: quotes[currency] for asset_id, quotes in table.items() if currency in quotes}

    def value_portfolio(
        self,
        owner: OwnerContext,
        quote_currency: str | None = None,
        sort_by: str = HoldingSortKey.VALUE,
        descending: bool = True,
    ) -> tuple[list[HoldingValuation], PortfolioTotals]:
        """Valuation rows (sorted) and totals for the owner's holdings."""
        currency = (quote_currency or settings.default_quote_currency).strip().lower()
        holdings = self._repo.list_by_owner(owner.owner_id)
        prices = self.fetch_prices((h.asset_id for h in holdings), currency)
        valuations = valuate(holdings, prices)
        return sort_valuations(valuations, sort_by, descending), summarize(valuations)
