"""Tests for the holdings router: CRUD, valuation, swap and sell."""

from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.exc import SQLAlchemyError

from coinfolio.models import Holding, Transaction
from coinfolio.services.repositories import TransactionRepository


class TestHoldingsCrud:
    """CRUD endpoints."""

    def test_create_and_list(self, client, auth_headers):
        response = client.post(
            "/api/holdings",
            json={"asset_id": "bitcoin", "quantity": "0.5", "cost_basis_price": "40000", "acquired_on": "2024-01-02"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        created = response.json()
        assert created["asset_id"] == "bitcoin"
        assert Decimal(created["quantity"]) == Decimal("0.5")

        listed = client.get("/api/holdings", headers=auth_headers).json()
        assert [h["id"] for h in listed] == [created["id"]]

    def test_create_rejects_zero_quantity(self, client, auth_headers, db):
        response = client.post("/api/holdings", json={"asset_id": "bitcoin", "quantity": "0"}, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        assert body["path"] == "/api/holdings"
        assert db.query(Holding).count() == 0

    def test_get_other_users_holding_forbidden(self, client, auth_headers, other_user, add_holding):
        theirs = add_holding(other_user, "bitcoin", "1")
        response = client.get(f"/api/holdings/{theirs.id}", headers=auth_headers)
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    def test_get_missing_holding(self, client, auth_headers):
        response = client.get("/api/holdings/9999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    def test_partial_update(self, client, auth_headers, test_user, add_holding):
        holding = add_holding(test_user, "bitcoin", "1", cost_basis_price="30000", note="keep me")

        response = client.put(f"/api/holdings/{holding.id}", json={"quantity": "2"}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["quantity"]) == Decimal("2")
        assert body["note"] == "keep me"
        assert Decimal(body["cost_basis_price"]) == Decimal("30000")

    def test_update_null_clears_note(self, client, auth_headers, test_user, add_holding):
        holding = add_holding(test_user, "bitcoin", "1", note="old")
        response = client.put(f"/api/holdings/{holding.id}", json={"note": None}, headers=auth_headers)
        assert response.json()["note"] is None

    def test_empty_update_rejected(self, client, auth_headers, test_user, add_holding):
        holding = add_holding(test_user, "bitcoin", "1")
        response = client.put(f"/api/holdings/{holding.id}", json={}, headers=auth_headers)
        assert response.status_code == 400

    def test_update_and_delete_by_asset(self, client, auth_headers, test_user, add_holding):
        add_holding(test_user, "bitcoin", "1")
        add_holding(test_user, "bitcoin", "2")

        response = client.put("/api/holdings/by-asset/bitcoin", json={"note": "main"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["note"] == "main"

        response = client.delete("/api/holdings/by-asset/bitcoin", headers=auth_headers)
        assert response.json() == {"deleted": 2}
        assert client.get("/api/holdings", headers=auth_headers).json() == []

    def test_delete_by_id(self, client, auth_headers, test_user, add_holding, db):
        holding = add_holding(test_user, "bitcoin", "1")
        response = client.delete(f"/api/holdings/{holding.id}", headers=auth_headers)
        assert response.json() == {"deleted": 1}
        assert db.query(Holding).count() == 0

    def test_delete_by_asset_not_held(self, client, auth_headers):
        response = client.delete("/api/holdings/by-asset/bitcoin", headers=auth_headers)
        assert response.status_code == 404

    def test_database_error_is_500(self, client, auth_headers):
        with patch("coinfolio.services.repositories.holding_repository.HoldingRepository.list_by_owner",
                   side_effect=SQLAlchemyError("connection lost")):
            response = client.get("/api/holdings", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "InternalError"


class TestValuation:
    """GET /api/holdings/valuation."""

    def test_rows_and_totals(self, client, auth_headers, test_user, add_holding):
        add_holding(test_user, "bitcoin", "1", cost_basis_price="40000")
        add_holding(test_user, "ethereum", "10", cost_basis_price="2000")
        add_holding(test_user, "mystery-coin", "5")

        response = client.get("/api/holdings/valuation", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["quote_currency"] == "usd"
        assert [r["asset_id"] for r in body["holdings"]] == ["bitcoin", "ethereum", "mystery-coin"]
        assert body["holdings"][2]["current_value"] is None
        assert Decimal(body["totals"]["total_value"]) == Decimal("75000")
        assert Decimal(body["totals"]["total_pnl"]) == Decimal("15000")
        assert Decimal(body["totals"]["total_pnl_percent"]) == Decimal("25")

    def test_sort_and_currency(self, client, auth_headers, test_user, add_holding):
        add_holding(test_user, "bitcoin", "1")
        add_holding(test_user, "ethereum", "1")

        response = client.get(
            "/api/holdings/valuation",
            params={"quote_currency": "EUR", "sort_by": "value", "descending": "false"},
            headers=auth_headers,
        )

        body = response.json()
        assert body["quote_currency"] == "eur"
        assert [r["asset_id"] for r in body["holdings"]] == ["ethereum", "bitcoin"]
        assert Decimal(body["holdings"][1]["current_price"]) == Decimal("46000")

    def test_invalid_sort_key(self, client, auth_headers):
        response = client.get("/api/holdings/valuation", params={"sort_by": "nope"}, headers=auth_headers)
        assert response.status_code == 400

    def test_oracle_down_still_returns_rows(self, client, auth_headers, test_user, add_holding, oracle):
        add_holding(test_user, "bitcoin", "1", cost_basis_price="40000")
        oracle.fail = True

        response = client.get("/api/holdings/valuation", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["holdings"][0]["current_price"] is None


class TestSwapEndpoint:
    """POST /api/holdings/swap."""

    def test_full_swap(self, client, auth_headers, test_user, add_holding, db):
        add_holding(test_user, "bitcoin", "2")

        response = client.post(
            "/api/holdings/swap",
            json={"from_asset_id": "bitcoin", "to_asset_id": "ethereum", "amount": "2", "quote_currency": "usd"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["received_amount"]) == Decimal("40")
        assert Decimal(body["from_price"]) == Decimal("50000")
        assert Decimal(body["to_price"]) == Decimal("2500")
        assert [h["asset_id"] for h in body["holdings"]] == ["ethereum"]
        assert db.query(Transaction).filter(Transaction.type == "swap").count() == 1

    def test_insufficient_balance(self, client, auth_headers, test_user, add_holding):
        add_holding(test_user, "bitcoin", "1")

        response = client.post(
            "/api/holdings/swap",
            json={"from_asset_id": "bitcoin", "to_asset_id": "ethereum", "amount": "3"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InsufficientBalance"

    def test_same_coin(self, client, auth_headers, test_user, add_holding):
        add_holding(test_user, "bitcoin", "1")
        response = client.post(
            "/api/holdings/swap",
            json={"from_asset_id": "bitcoin", "to_asset_id": "bitcoin", "amount": "1"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Choose a different coin to receive"

    def test_price_unavailable_is_502(self, client, auth_headers, test_user, add_holding, oracle, db):
        add_holding(test_user, "bitcoin", "1")
        oracle.fail = True

        response = client.post(
            "/api/holdings/swap",
            json={"from_asset_id": "bitcoin", "to_asset_id": "ethereum", "amount": "1"},
            headers=auth_headers,
        )

        assert response.status_code == 502
        assert response.json()["error"] == "PriceUnavailable"
        assert db.query(Holding).one().asset_id == "bitcoin"

    def test_log_failure_still_succeeds(self, client, auth_headers, test_user, add_holding):
        add_holding(test_user, "bitcoin", "2")

        with patch.object(TransactionRepository, "append", side_effect=SQLAlchemyError("log down")):
            response = client.post(
                "/api/holdings/swap",
                json={"from_asset_id": "bitcoin", "to_asset_id": "ethereum", "amount": "2"},
                headers=auth_headers,
            )

        assert response.status_code == 200
        assert Decimal(response.json()["received_amount"]) == Decimal("40")

    def test_missing_field_is_422(self, client, auth_headers):
        response = client.post("/api/holdings/swap", json={"from_asset_id": "bitcoin"}, headers=auth_headers)
        assert response.status_code == 422


class TestSellEndpoint:
    """POST /api/holdings/sell."""

    def test_sell_all(self, client, auth_headers, test_user, add_holding, db):
        add_holding(test_user, "bitcoin", "2")

        response = client.post(
            "/api/holdings/sell", json={"asset_id": "bitcoin", "amount": "2", "price": "50000"}, headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["deleted"] is True
        assert Decimal(body["remaining_quantity"]) == Decimal("0")
        assert db.query(Transaction).one().type == "sell"

    def test_sell_partial(self, client, auth_headers, test_user, add_holding):
        add_holding(test_user, "bitcoin", "2")
        response = client.post("/api/holdings/sell", json={"asset_id": "bitcoin", "amount": "0.5"}, headers=auth_headers)
        assert response.json()["deleted"] is False
        assert Decimal(response.json()["remaining_quantity"]) == Decimal("1.5")

    def test_sell_not_held(self, client, auth_headers):
        response = client.post("/api/holdings/sell", json={"asset_id": "bitcoin", "amount": "1"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "InsufficientBalance"
