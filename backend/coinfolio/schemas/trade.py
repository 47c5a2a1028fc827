"""Schemas for the swap and sell workflows."""

from decimal import Decimal

from pydantic import BaseModel, Field

from coinfolio.schemas.holding import Holding


class SwapRequest(BaseModel):
    """Swap part of one holding into another coin at current prices."""

    from_asset_id: str = Field(..., max_length=100)
    to_asset_id: str = Field(..., max_length=100)
    amount: Decimal = Field(..., description="Quantity of from_asset_id to give up")
    quote_currency: str | None = Field(None, max_length=10, description="Defaults to usd")


class SwapResponse(BaseModel):
    holdings: list[Holding]
    received_amount: Decimal
    from_price: Decimal
    to_price: Decimal


class SellRequest(BaseModel):
    """Reduce a holding. price is informational and only recorded in the log."""

    asset_id: str = Field(..., max_length=100)
    amount: Decimal
    price: Decimal | None = None
    quote_currency: str | None = Field(None, max_length=10)


class SellResponse(BaseModel):
    asset_id: str
    remaining_quantity: Decimal
    deleted: bool
