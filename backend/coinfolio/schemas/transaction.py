"""Pydantic schemas for the transaction log."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Transaction(BaseModel):
    """Schema for Transaction responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    asset_id: str
    amount: Decimal
    price: Decimal | None = None
    quote_currency: str | None = None
    total_value: Decimal | None = None
    counter_asset_id: str | None = None
    counter_amount: Decimal | None = None
    counter_price: Decimal | None = None
    note: str | None = None
    created_at: datetime


class TransactionCreate(BaseModel):
    """Schema for appending a manual entry to the log."""

    type: Literal["buy", "sell", "swap"] = Field(..., description="Transaction type: buy, sell or swap")
    asset_id: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0)
    price: Decimal | None = Field(None, ge=0)
    quote_currency: str | None = Field(None, max_length=10)
    counter_asset_id: str | None = Field(None, max_length=100)
    counter_amount: Decimal | None = Field(None, gt=0)
    counter_price: Decimal | None = Field(None, ge=0)
    note: str | None = None

    @model_validator(mode="after")
    def check_swap_fields(self) -> "TransactionCreate":
        if self.type == "swap":
            missing = [
                name
                for name in ("counter_asset_id", "counter_amount", "price", "counter_price")
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(f"Swap entries require: {', '.join(missing)}")
        return self
