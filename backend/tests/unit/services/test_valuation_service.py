"""Tests for portfolio valuation."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from coinfolio.models import Holding
from coinfolio.services.portfolio import PortfolioValuationService, sort_valuations, summarize, valuate
from coinfolio.services.portfolio.valuation_service import valuate_holding


def make_holding(holding_id, asset_id, quantity, cost_basis_price=None, acquired_on=None, created_at=None):
    """Unsaved holding; valuation never touches the database."""
    return Holding(
        id=holding_id,
        owner_id="owner-1",
        asset_id=asset_id,
        quantity=Decimal(quantity),
        cost_basis_price=Decimal(cost_basis_price) if cost_basis_price is not None else None,
        acquired_on=acquired_on,
        created_at=created_at or datetime(2024, 1, 1, 12, 0),
    )


class TestValuateHolding:
    """Tests for per-row values."""

    def test_all_values_present(self):
        row = valuate_holding(make_holding(1, "bitcoin", "2", "40000"), Decimal("50000"))

        assert row.current_value == Decimal("100000")
        assert row.cost_basis == Decimal("80000")
        assert row.pnl == Decimal("20000")
        assert row.pnl_percent == Decimal("25")

    def test_missing_price(self):
        row = valuate_holding(make_holding(1, "bitcoin", "2", "40000"), None)

        assert row.current_price is None
        assert row.current_value is None
        assert row.cost_basis == Decimal("80000")
        assert row.pnl is None
        assert row.pnl_percent is None

    def test_missing_cost_basis(self):
        row = valuate_holding(make_holding(1, "bitcoin", "2"), Decimal("50000"))

        assert row.current_value == Decimal("100000")
        assert row.cost_basis is None
        assert row.pnl is None

    def test_zero_cost_basis_has_no_percent(self):
        row = valuate_holding(make_holding(1, "airdrop", "10", "0"), Decimal("3"))

        assert row.pnl == Decimal("30")
        assert row.pnl_percent is None


class TestSummarize:
    """Tests for portfolio totals."""

    def test_totals_treat_absent_as_zero(self):
        rows = valuate(
            [
                make_holding(1, "bitcoin", "1", "40000"),
                make_holding(2, "ethereum", "10", "2000"),
                make_holding(3, "unknown", "5", "10"),
            ],
            {"bitcoin": Decimal("50000"), "ethereum": Decimal("2500")},
        )

        totals = summarize(rows)

        assert totals.total_value == Decimal("75000")
        assert totals.total_cost_basis == Decimal("60050")
        assert totals.total_pnl == Decimal("15000")
        assert totals.holding_count == 3

    def test_total_pnl_percent(self):
        rows = valuate([make_holding(1, "bitcoin", "1", "40000")], {"bitcoin": Decimal("50000")})
        assert summarize(rows).total_pnl_percent == Decimal("25")

    def test_empty_portfolio(self):
        totals = summarize([])
        assert totals.total_value == Decimal("0")
        assert totals.total_pnl_percent is None
        assert totals.holding_count == 0

    def test_idempotent(self):
        holdings = [make_holding(1, "bitcoin", "1", "40000"), make_holding(2, "ethereum", "3", "1000")]
        prices = {"bitcoin": Decimal("50000"), "ethereum": Decimal("2500")}

        assert valuate(holdings, prices) == valuate(holdings, prices)
        assert summarize(valuate(holdings, prices)) == summarize(valuate(holdings, prices))


class TestSortValuations:
    """Tests for sort_valuations."""

    @pytest.fixture
    def rows(self):
        holdings = [
            make_holding(1, "ethereum", "10", "2000", acquired_on=date(2024, 3, 1)),
            make_holding(2, "bitcoin", "1", "40000", acquired_on=date(2023, 6, 1)),
            make_holding(3, "unknown", "5", None, created_at=datetime(2024, 5, 1, 9, 0)),
        ]
        return valuate(holdings, {"bitcoin": Decimal("50000"), "ethereum": Decimal("2000")})

    def test_value_descending_absent_last(self, rows):
        result = sort_valuations(rows, "value", descending=True)
        assert [r.asset_id for r in result] == ["bitcoin", "ethereum", "unknown"]

    def test_value_ascending_absent_first(self, rows):
        result = sort_valuations(rows, "value", descending=False)
        assert [r.asset_id for r in result] == ["unknown", "ethereum", "bitcoin"]

    def test_asset_id(self, rows):
        result = sort_valuations(rows, "asset_id", descending=False)
        assert [r.asset_id for r in result] == ["bitcoin", "ethereum", "unknown"]

    def test_date_falls_back_to_created_at(self, rows):
        result = sort_valuations(rows, "date", descending=True)
        assert [r.asset_id for r in result] == ["unknown", "ethereum", "bitcoin"]

    def test_pnl_and_purchase_price(self, rows):
        assert [r.asset_id for r in sort_valuations(rows, "pnl")] == ["bitcoin", "ethereum", "unknown"]
        assert [r.asset_id for r in sort_valuations(rows, "purchase_price", False)] == [
            "unknown",
            "ethereum",
            "bitcoin",
        ]

    def test_stable_for_ties(self):
        holdings = [make_holding(i, f"coin-{i}", "1", "1") for i in range(1, 5)]
        rows = valuate(holdings, {})
        result = sort_valuations(rows, "value", descending=True)
        assert [r.holding_id for r in result] == [1, 2, 3, 4]

    def test_unknown_key(self, rows):
        with pytest.raises(ValueError):
            sort_valuations(rows, "market_cap")


class TestPortfolioValuationService:
    """Valuation wired to the ledger and the oracle."""

    def test_values_owner_holdings(self, db, oracle, owner, test_user, other_user, add_holding):
        add_holding(test_user, "bitcoin", "1", cost_basis_price="40000")
        add_holding(other_user, "ethereum", "100")

        rows, totals = PortfolioValuationService(db, oracle).value_portfolio(owner, "usd")

        assert [r.asset_id for r in rows] == ["bitcoin"]
        assert totals.total_value == Decimal("50000")
        assert totals.total_pnl == Decimal("10000")

    def test_oracle_failure_degrades_to_no_prices(self, db, oracle, owner, test_user, add_holding):
        add_holding(test_user, "bitcoin", "1", cost_basis_price="40000")
        oracle.fail = True

        rows, totals = PortfolioValuationService(db, oracle).value_portfolio(owner, "usd")

        assert rows[0].current_price is None
        assert totals.total_value == Decimal("0")
        assert totals.total_cost_basis == Decimal("40000")

    def test_empty_ledger_skips_oracle(self, db, oracle, owner):
        rows, totals = PortfolioValuationService(db, oracle).value_portfolio(owner)
        assert rows == []
        assert oracle.calls == []
