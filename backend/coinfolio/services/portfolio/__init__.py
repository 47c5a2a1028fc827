"""Portfolio services.

Holdings ledger, swap and sell workflows, transaction log and valuation.
"""

from .exceptions import (
    InsufficientBalanceError,
    LedgerValidationError,
    PortfolioError,
    PriceUnavailableError,
)
from .ledger_service import HoldingsLedger
from .swap_service import SwapService
from .transaction_log import BuyEvent, SellEvent, SwapEvent, TransactionLog
from .valuation_service import PortfolioValuationService, sort_valuations, summarize, valuate
from .valuation_types import HoldingValuation, OwnerContext, PortfolioTotals, SellResult, SwapResult

__all__ = [
    "BuyEvent",
    "HoldingValuation",
    "HoldingsLedger",
    "InsufficientBalanceError",
    "LedgerValidationError",
    "OwnerContext",
    "PortfolioError",
    "PortfolioTotals",
    "PortfolioValuationService",
    "PriceUnavailableError",
    "SellEvent",
    "SellResult",
    "SwapEvent",
    "SwapResult",
    "SwapService",
    "TransactionLog",
    "sort_valuations",
    "summarize",
    "valuate",
]
