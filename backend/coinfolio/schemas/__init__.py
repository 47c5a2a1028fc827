"""Pydantic schemas for API validation."""

from coinfolio.schemas.admin import RoleUpdate
from coinfolio.schemas.auth import TokenResponse, UserInfo, UserLogin, UserRegister
from coinfolio.schemas.common import ErrorDetail, ErrorResponse, MessageResponse
from coinfolio.schemas.holding import Holding, HoldingCreate, HoldingDeleteResponse, HoldingUpdate
from coinfolio.schemas.trade import SellRequest, SellResponse, SwapRequest, SwapResponse
from coinfolio.schemas.transaction import Transaction, TransactionCreate
from coinfolio.schemas.user import (
    CurrencyPreferenceUpdate,
    LanguagePreferenceUpdate,
    PasswordChange,
    UserProfile,
)
from coinfolio.schemas.valuation import HoldingValuation, PortfolioTotals, PortfolioValuationResponse
from coinfolio.schemas.watchlist import WatchlistItem, WatchlistItemCreate

__all__ = [
    "CurrencyPreferenceUpdate",
    "ErrorDetail",
    "ErrorResponse",
    "Holding",
    "HoldingCreate",
    "HoldingDeleteResponse",
    "HoldingUpdate",
    "HoldingValuation",
    "LanguagePreferenceUpdate",
    "MessageResponse",
    "PasswordChange",
    "PortfolioTotals",
    "PortfolioValuationResponse",
    "RoleUpdate",
    "SellRequest",
    "SellResponse",
    "SwapRequest",
    "SwapResponse",
    "TokenResponse",
    "Transaction",
    "TransactionCreate",
    "UserInfo",
    "UserLogin",
    "UserProfile",
    "UserRegister",
    "WatchlistItem",
    "WatchlistItemCreate",
]
