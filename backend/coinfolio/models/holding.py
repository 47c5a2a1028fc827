"""Holding model - a user's position in one crypto asset."""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from coinfolio.database import Base

if TYPE_CHECKING:
    from coinfolio.models.user import User


class Holding(Base):
    """Holding model representing one position row in a user's ledger.

    (owner_id, asset_id) is logically unique but deliberately not a constraint:
    direct creation may add a second row for an asset the user already holds.
    """

    __tablename__ = "holdings"
    __table_args__ = (
        Index("idx_holdings_owner_asset", "owner_id", "asset_id"),
        Index("idx_holdings_owner_created", "owner_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    asset_id: Mapped[str] = mapped_column(String(100))  # CoinGecko coin id, e.g. "bitcoin"
    quantity: Mapped[Decimal] = mapped_column(Numeric(38, 18))
    cost_basis_price: Mapped[Decimal | None] = mapped_column(Numeric(30, 10))  # per unit
    acquired_on: Mapped[date | None] = mapped_column(Date)
    note: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="holdings")

    def __repr__(self) -> str:
        return f"<Holding(id={self.id}, owner_id={self.owner_id}, asset_id='{self.asset_id}', quantity={self.quantity})>"
