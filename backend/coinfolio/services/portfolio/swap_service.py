"""Swap workflow - exchange part of one holding for another at spot prices.

The two ledger legs (debit source, credit destination) run in a single
database transaction with both rows locked, so a swap is either fully
applied or not at all. The audit record is written afterwards and may be
lost without affecting the swap.
"""

import logging
from datetime import date
from decimal import Decimal, localcontext
from typing import Protocol

from sqlalchemy.orm import Session

from coinfolio.config import settings
from coinfolio.constants import QUANTITY_QUANTUM
from coinfolio.services.coingecko_client import OracleUnavailableError
from coinfolio.services.portfolio.amounts import (
    WORKING_PRECISION,
    non_negative_price,
    positive_amount,
    quantize_price,
    quantize_quantity,
)
from coinfolio.services.portfolio.exceptions import (
    InsufficientBalanceError,
    LedgerValidationError,
    PriceUnavailableError,
)
from coinfolio.services.portfolio.transaction_log import SellEvent, SwapEvent, TransactionLog
from coinfolio.services.portfolio.valuation_types import OwnerContext, SellResult, SwapResult
from coinfolio.services.repositories import HoldingRepository

logger = logging.getLogger(__name__)


class PriceOracle(Protocol):
    def get_simple_price(self, asset_ids, quote_currencies) -> dict[str, dict[str, Decimal]]: ...


def calculate_received_amount(amount: Decimal, from_price: Decimal, to_price: Decimal) -> Decimal:
    """amount * from_price / to_price at 50 significant digits, unrounded."""
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        return amount * from_price / to_price


class SwapService:
    """Swap and sell workflows over the holdings ledger.

    Usage:
        service = SwapService(db, oracle)
        result = service.swap(owner, "bitcoin", "ethereum", Decimal("2"), "usd")
        result.received_amount  # Decimal("40") at 50000 / 2500
    """

    def __init__(
        self,
        db: Session,
        oracle: PriceOracle | None = None,
        transaction_log: TransactionLog | None = None,
    ) -> None:
        self._db = db
        self._oracle = oracle
        self._repo = HoldingRepository(db)
        self._log = transaction_log or TransactionLog(db)

    @staticmethod
    def _parse_amount(amount) -> tuple[Decimal, Decimal]:
        """(requested, debited): the caller's exact amount and its 18 dp storage form.

        Balance checks compare the requested amount, never the rounded one.
        """
        requested = positive_amount(amount)
        debited = quantize_quantity(requested)
        if debited <= 0:
            raise LedgerValidationError(f"amount must be at least {QUANTITY_QUANTUM}")
        return requested, debited

    def _check_balance(self, owner: OwnerContext, asset_id: str, amount: Decimal, action: str) -> None:
        holding = self._repo.find_by_owner_and_asset(owner.owner_id, asset_id)
        if holding is None:
            raise InsufficientBalanceError(asset_id, requested=amount, action=action)
        if holding.quantity < amount:
            raise InsufficientBalanceError(asset_id, requested=amount, available=holding.quantity, action=action)

    def _fetch_prices(self, from_asset_id: str, to_asset_id: str, currency: str) -> tuple[Decimal, Decimal]:
        if self._oracle is None:
            raise PriceUnavailableError("No price oracle configured")
        try:
            table = self._oracle.get_simple_price([from_asset_id, to_asset_id], [currency])
        except OracleUnavailableError as e:
            logger.warning(f"Price oracle unavailable for swap {from_asset_id}->{to_asset_id}: {e}")
            raise PriceUnavailableError("Failed to fetch prices for swap") from e

        from_price = table.get(from_asset_id, {}).get(currency)
        to_price = table.get(to_asset_id, {}).get(currency)
        if from_price is None or to_price is None:
            missing = from_asset_id if from_price is None else to_asset_id
            raise PriceUnavailableError(f"No {currency} price available for {missing}")
        if to_price <= 0:
            raise PriceUnavailableError(f"Price for {to_asset_id} is zero")
        if from_price <= 0:
            raise PriceUnavailableError(f"Price for {from_asset_id} is zero")
        return from_price, to_price

    def swap(
        self,
        owner: OwnerContext,
        from_asset_id: str,
        to_asset_id: str,
        amount,
        quote_currency: str | None = None,
    ) -> SwapResult:
        """Swap amount of from_asset_id into to_asset_id at current prices.

        Args:
            owner: Caller identity
            from_asset_id: Asset to give up (must be held)
            to_asset_id: Asset to receive (created if not held)
            amount: Quantity of from_asset_id to swap, > 0
            quote_currency: Currency both prices are fetched in

        Returns:
            SwapResult with the owner's holdings after the swap

        Raises:
            LedgerValidationError: Blank or identical assets, bad amount
            InsufficientBalanceError: Source not held or held in smaller quantity
            PriceUnavailableError: A price is missing, zero, or the oracle failed
        """
        from_asset_id = from_asset_id.strip() if isinstance(from_asset_id, str) else ""
        to_asset_id = to_asset_id.strip() if isinstance(to_asset_id, str) else ""
        if not from_asset_id or not to_asset_id:
            raise LedgerValidationError("from_asset_id and to_asset_id are required")
        if from_asset_id == to_asset_id:
            raise LedgerValidationError("Choose a different coin to receive")
        requested, amount = self._parse_amount(amount)
        currency = (quote_currency or settings.default_quote_currency).strip().lower()

        self._check_balance(owner, from_asset_id, requested, "swap")
        from_price, to_price = self._fetch_prices(from_asset_id, to_asset_id, currency)

        received = calculate_received_amount(amount, from_price, to_price)
        stored_received = quantize_quantity(received)
        if stored_received <= 0:
            raise LedgerValidationError("amount is too small to receive any of the destination coin")

        try:
            # Lock both rows in a fixed order so opposite swaps cannot deadlock
            for asset_id in sorted((from_asset_id, to_asset_id)):
                self._repo.find_by_owner_and_asset(owner.owner_id, asset_id, for_update=True)

            # Balance may have moved while the prices were being fetched
            self._check_balance(owner, from_asset_id, requested, "swap")
            self._repo.adjust_quantity(owner.owner_id, from_asset_id, -amount)

            destination = self._repo.find_by_owner_and_asset(owner.owner_id, to_asset_id, for_update=True)
            if destination is not None:
                destination.quantity = destination.quantity + stored_received
                self._db.flush()
            else:
                self._repo.create(
                    owner.owner_id,
                    to_asset_id,
                    stored_received,
                    cost_basis_price=quantize_price(to_price),
                    acquired_on=date.today(),
                    note=f"Swapped from {from_asset_id}",
                )
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        logger.info(
            f"Owner {owner.owner_id} swapped {amount} {from_asset_id} @ {from_price} "
            f"for {stored_received} {to_asset_id} @ {to_price} {currency}"
        )
        holdings = list(self._repo.list_by_owner(owner.owner_id))

        self._log.record(
            owner,
            SwapEvent(
                from_asset_id=from_asset_id,
                to_asset_id=to_asset_id,
                from_amount=amount,
                to_amount=stored_received,
                from_price=from_price,
                to_price=to_price,
                quote_currency=currency,
            ),
        )
        return SwapResult(
            holdings=holdings,
            received_amount=received,
            from_price=from_price,
            to_price=to_price,
        )

    def sell(
        self,
        owner: OwnerContext,
        asset_id: str,
        amount,
        price=None,
        quote_currency: str | None = None,
    ) -> SellResult:
        """Reduce a holding by amount; selling everything deletes the row.

        No price lookup is made: price is whatever the caller reports and is
        only used for the audit record.

        Raises:
            LedgerValidationError: Blank asset, bad amount or negative price
            InsufficientBalanceError: Asset not held or held in smaller quantity
        """
        asset_id = asset_id.strip() if isinstance(asset_id, str) else ""
        if not asset_id:
            raise LedgerValidationError("asset_id is required")
        requested, amount = self._parse_amount(amount)
        price = non_negative_price(price)
        currency = quote_currency.strip().lower() if quote_currency else None

        try:
            self._repo.find_by_owner_and_asset(owner.owner_id, asset_id, for_update=True)
            self._check_balance(owner, asset_id, requested, "sell")
            remaining = self._repo.adjust_quantity(owner.owner_id, asset_id, -amount)
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        deleted = remaining is None
        remaining_quantity = Decimal("0") if deleted else remaining.quantity
        logger.info(f"Owner {owner.owner_id} sold {amount} {asset_id}; remaining {remaining_quantity}")
        holdings = list(self._repo.list_by_owner(owner.owner_id))

        self._log.record(
            owner,
            SellEvent(asset_id=asset_id, amount=amount, price=price, quote_currency=currency),
        )
        return SellResult(
            asset_id=asset_id,
            remaining_quantity=remaining_quantity,
            deleted=deleted,
            holdings=holdings,
        )
