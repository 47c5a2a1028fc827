"""Shared test fixtures: in-memory database, fake price oracle, users and tokens."""

from collections.abc import Iterable
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coinfolio.constants import UserRole
from coinfolio.database import Base, get_db
from coinfolio.dependencies.market import get_price_oracle
from coinfolio.main import app
from coinfolio.models import Holding, User
from coinfolio.rate_limiter import limiter
from coinfolio.services.auth_service import AuthService
from coinfolio.services.coingecko_client import OracleUnavailableError
from coinfolio.services.portfolio import OwnerContext

TEST_PASSWORD = "Password123"


class FakePriceOracle:
    """In-memory stand-in for CoinGeckoClient.

    Prices are keyed by coin id then lower-case currency. Set `fail` to make
    every call raise OracleUnavailableError.
    """

    def __init__(self, prices: dict[str, dict[str, Decimal]] | None = None):
        self.prices = prices if prices is not None else {}
        self.fail = False
        self.calls: list[tuple[list[str], list[str]]] = []

    def set_price(self, asset_id: str, price, currency: str = "usd") -> None:
        self.prices.setdefault(asset_id, {})[currency] = Decimal(str(price))

    def get_simple_price(self, asset_ids: Iterable[str], quote_currencies: Iterable[str]):
        ids = sorted(set(asset_ids))
        currencies = sorted({c.lower() for c in quote_currencies})
        self.calls.append((ids, currencies))
        if self.fail:
            raise OracleUnavailableError("oracle down", status_code=503)
        result = {}
        for asset_id in ids:
            quotes = {c: p for c, p in self.prices.get(asset_id, {}).items() if c in currencies}
            if quotes:
                result[asset_id] = quotes
        return result

    def get_markets(self, vs_currency="usd", per_page=100, page=1, order="market_cap_desc"):
        return [
            {"id": asset_id, "current_price": float(quotes[vs_currency])}
            for asset_id, quotes in self.prices.items()
            if vs_currency in quotes
        ][:per_page]

    def search(self, query):
        return {"coins": [{"id": asset_id} for asset_id in self.prices if query in asset_id]}

    def get_trending(self):
        return {"coins": [{"item": {"id": asset_id}} for asset_id in self.prices]}

    def get_supported_currencies(self):
        return ["usd", "eur", "btc"]

    def get_coin(self, coin_id):
        if self.fail:
            raise OracleUnavailableError("oracle down")
        return {"id": coin_id, "market_data": {"current_price": {c: float(p) for c, p in self.prices.get(coin_id, {}).items()}}}


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    """Database session shared by the test and the app under test."""
    testing_session_local = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def oracle():
    """Fake oracle preloaded with round, binary-friendly prices."""
    return FakePriceOracle(
        {
            "bitcoin": {"usd": Decimal("50000"), "eur": Decimal("46000")},
            "ethereum": {"usd": Decimal("2500"), "eur": Decimal("2300")},
            "solana": {"usd": Decimal("100")},
        }
    )


@pytest.fixture
def client(db, oracle):
    """Test client with database and price oracle overrides."""
    limiter.reset()

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_price_oracle] = lambda: oracle
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db, email: str, role: str = UserRole.USER, is_active: bool = True) -> User:
    user = User(
        email=email,
        password_hash=AuthService.hash_password(TEST_PASSWORD),
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _headers_for(user: User) -> dict[str, str]:
    token = AuthService.create_access_token(user.id, role=user.role)
    return {"Authorization": f"Bearer {token}"}


def _add_holding(db, user: User, asset_id: str, quantity, cost_basis_price=None, **fields) -> Holding:
    holding = Holding(
        owner_id=user.id,
        asset_id=asset_id,
        quantity=Decimal(str(quantity)),
        cost_basis_price=Decimal(str(cost_basis_price)) if cost_basis_price is not None else None,
        **fields,
    )
    db.add(holding)
    db.commit()
    db.refresh(holding)
    return holding


@pytest.fixture
def test_user(db):
    return _make_user(db, "test@example.com")


@pytest.fixture
def other_user(db):
    return _make_user(db, "other@example.com")


@pytest.fixture
def admin_user(db):
    return _make_user(db, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def owner(test_user):
    """Ledger identity of test_user."""
    return OwnerContext(owner_id=test_user.id, role=test_user.role)


@pytest.fixture
def auth_headers(test_user):
    return _headers_for(test_user)


@pytest.fixture
def make_user(db):
    """Factory: make_user(email, role="user", is_active=True) -> User."""

    def factory(email: str, role: str = UserRole.USER, is_active: bool = True) -> User:
        return _make_user(db, email, role=role, is_active=is_active)

    return factory


@pytest.fixture
def headers_for():
    """Factory: headers_for(user) -> Authorization header dict."""
    return _headers_for


@pytest.fixture
def add_holding(db):
    """Factory: add_holding(user, asset_id, quantity, cost_basis_price=None, **fields) -> Holding."""

    def factory(user: User, asset_id: str, quantity, cost_basis_price=None, **fields) -> Holding:
        return _add_holding(db, user, asset_id, quantity, cost_basis_price, **fields)

    return factory
