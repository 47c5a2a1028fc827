"""Transaction model - append-only audit log of ledger events."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from coinfolio.database import Base

if TYPE_CHECKING:
    from coinfolio.models.user import User


class Transaction(Base):
    """Audit record of a buy, sell or swap. Never updated once written."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_owner_created", "owner_id", "created_at"),
        Index("idx_transactions_type", "type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    type: Mapped[str] = mapped_column(String(10))  # 'buy', 'sell', 'swap'
    asset_id: Mapped[str] = mapped_column(String(100))
    amount: Mapped[Decimal] = mapped_column(Numeric(38, 18))
    price: Mapped[Decimal | None] = mapped_column(Numeric(30, 10))
    quote_currency: Mapped[str | None] = mapped_column(String(10))
    total_value: Mapped[Decimal | None] = mapped_column(Numeric(38, 10))
    note: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    # Swap-specific fields (only populated for swap transactions)
    counter_asset_id: Mapped[str | None] = mapped_column(String(100))  # asset received
    counter_amount: Mapped[Decimal | None] = mapped_column(Numeric(38, 18))
    counter_price: Mapped[Decimal | None] = mapped_column(Numeric(30, 10))

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="transactions")

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, type='{self.type}', asset_id='{self.asset_id}', amount={self.amount})>"
