"""Pydantic schemas for the watchlist."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class WatchlistItemCreate(BaseModel):
    asset_id: str = Field(..., min_length=1, max_length=100)
    note: str | None = None
    target_price: Decimal | None = Field(None, ge=0, description="Alert price, zero or greater")


class WatchlistItem(BaseModel):
    """Schema for watchlist responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    asset_id: str
    note: str | None = None
    target_price: Decimal | None = None
    added_at: datetime
