"""Watchlist model - coins a user follows without holding them."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from coinfolio.database import Base

if TYPE_CHECKING:
    from coinfolio.models.user import User


class WatchlistItem(Base):
    """A coin on a user's watchlist, with an optional target price."""

    __tablename__ = "watchlist_items"
    __table_args__ = (
        UniqueConstraint("owner_id", "asset_id", name="uq_watchlist_owner_asset"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    asset_id: Mapped[str] = mapped_column(String(100))
    note: Mapped[str | None] = mapped_column(Text)
    target_price: Mapped[Decimal | None] = mapped_column(Numeric(30, 10))
    added_at: Mapped[datetime] = mapped_column(server_default=func.now())

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="watchlist_items")

    def __repr__(self) -> str:
        return f"<WatchlistItem(id={self.id}, owner_id={self.owner_id}, asset_id='{self.asset_id}')>"
