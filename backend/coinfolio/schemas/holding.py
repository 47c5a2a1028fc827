"""Pydantic schemas for the holdings ledger."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class HoldingCreate(BaseModel):
    """Schema for adding a position.

    Amount rules (quantity > 0, price >= 0) are enforced by the ledger so
    they surface as ValidationError rather than a schema error.
    """

    asset_id: str = Field(..., max_length=100, description="CoinGecko coin id, e.g. 'bitcoin'")
    quantity: Decimal = Field(..., description="Units held, must be positive")
    cost_basis_price: Decimal | None = Field(None, description="Per-unit purchase price")
    acquired_on: date | None = None
    note: str | None = None


class HoldingUpdate(BaseModel):
    """Schema for a partial update. Only fields present in the body change."""

    asset_id: str | None = Field(None, max_length=100)
    quantity: Decimal | None = None
    cost_basis_price: Decimal | None = None
    acquired_on: date | None = None
    note: str | None = None


class Holding(BaseModel):
    """Schema for Holding responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    asset_id: str
    quantity: Decimal
    cost_basis_price: Decimal | None = None
    acquired_on: date | None = None
    note: str | None = None
    created_at: datetime
    updated_at: datetime


class HoldingDeleteResponse(BaseModel):
    deleted: int
