"""Application constants to avoid magic strings."""

from decimal import Decimal


class TransactionType:
    """Transaction log entry types."""

    BUY = "buy"
    SELL = "sell"
    SWAP = "swap"

    ALL = (BUY, SELL, SWAP)


class UserRole:
    """User role constants."""

    USER = "user"
    ADMIN = "admin"

    ALL = (USER, ADMIN)


class HoldingSortKey:
    """Sort keys accepted by the valuation view."""

    ASSET_ID = "asset_id"
    QUANTITY = "quantity"
    PURCHASE_PRICE = "purchase_price"
    CURRENT_PRICE = "current_price"
    VALUE = "value"
    PNL = "pnl"
    DATE = "date"

    ALL = (ASSET_ID, QUANTITY, PURCHASE_PRICE, CURRENT_PRICE, VALUE, PNL, DATE)


# Storage precision for ledger amounts (matches Numeric(38, 18) columns)
QUANTITY_QUANTUM = Decimal("1e-18")
PRICE_QUANTUM = Decimal("1e-10")
