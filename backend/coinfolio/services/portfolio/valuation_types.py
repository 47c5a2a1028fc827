"""Value objects for portfolio valuation and ledger workflows."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from coinfolio.constants import UserRole
from coinfolio.models import Holding


@dataclass(frozen=True)
class OwnerContext:
    """Resolved identity of the caller. Every ledger call is scoped to it."""

    owner_id: str
    role: str = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass
class HoldingValuation:
    """Calculated values for a single holding."""

    holding_id: int
    asset_id: str
    quantity: Decimal
    cost_basis_price: Decimal | None
    acquired_on: date | None
    created_at: datetime | None
    note: str | None

    current_price: Decimal | None
    current_value: Decimal | None
    cost_basis: Decimal | None
    pnl: Decimal | None
    pnl_percent: Decimal | None


@dataclass
class PortfolioTotals:
    """Aggregate over a set of valuations. Absent values count as zero."""

    total_value: Decimal
    total_cost_basis: Decimal
    total_pnl: Decimal
    total_pnl_percent: Decimal | None
    holding_count: int


@dataclass
class SwapResult:
    """Outcome of a committed swap."""

    holdings: list[Holding]
    received_amount: Decimal
    from_price: Decimal
    to_price: Decimal


@dataclass
class SellResult:
    """Outcome of a committed sell."""

    asset_id: str
    remaining_quantity: Decimal
    deleted: bool
    holdings: list[Holding] = field(default_factory=list)
