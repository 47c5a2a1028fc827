"""Market data router - thin pass-throughs to CoinGecko.

Responses are CoinGecko's JSON, unchanged. Any oracle failure is a 502.
"""

from fastapi import APIRouter, Depends, Query

from coinfolio.dependencies.auth import get_current_user
from coinfolio.dependencies.market import get_price_oracle
from coinfolio.models.user import User
from coinfolio.services.coingecko_client import CoinGeckoClient

router = APIRouter(prefix="/api/coins", tags=["coins"])


@router.get("/markets")
def get_markets(
    vs_currency: str = Query("usd", max_length=10),
    per_page: int = Query(100, ge=1, le=250),
    page: int = Query(1, ge=1),
    order: str = Query("market_cap_desc"),
    oracle: CoinGeckoClient = Depends(get_price_oracle),
    current_user: User = Depends(get_current_user),
) -> list[dict]:
    """Top coins with price, market cap, volume and 24h change."""
    return oracle.get_markets(vs_currency=vs_currency, per_page=per_page, page=page, order=order)


@router.get("/search")
def search_coins(
    query: str = Query(..., min_length=1),
    oracle: CoinGeckoClient = Depends(get_price_oracle),
    current_user: User = Depends(get_current_user),
) -> dict:
    return oracle.search(query)


@router.get("/trending")
def get_trending(
    oracle: CoinGeckoClient = Depends(get_price_oracle),
    current_user: User = Depends(get_current_user),
) -> dict:
    return oracle.get_trending()


@router.get("/currencies")
def get_supported_currencies(
    oracle: CoinGeckoClient = Depends(get_price_oracle),
    current_user: User = Depends(get_current_user),
) -> list[str]:
    """Quote currencies prices can be requested in."""
    return oracle.get_supported_currencies()


@router.get("/{coin_id}/price")
def get_coin_price(
    coin_id: str,
    vs_currencies: str = Query("usd", description="Comma-separated currency codes"),
    oracle: CoinGeckoClient = Depends(get_price_oracle),
    current_user: User = Depends(get_current_user),
) -> dict[str, str]:
    """Spot price of one coin in each requested currency. Unknown currencies are omitted."""
    currencies = [c for c in vs_currencies.split(",") if c.strip()] or ["usd"]
    table = oracle.get_simple_price([coin_id], currencies)
    return {currency: str(price) for currency, price in table.get(coin_id.strip(), {}).items()}


@router.get("/{coin_id}")
def get_coin(
    coin_id: str,
    oracle: CoinGeckoClient = Depends(get_price_oracle),
    current_user: User = Depends(get_current_user),
) -> dict:
    return oracle.get_coin(coin_id)
