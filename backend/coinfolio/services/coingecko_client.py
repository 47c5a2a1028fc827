"""CoinGecko API client - the price oracle for every coin in the ledger.

Assets are identified by CoinGecko coin ids ("bitcoin", "ethereum") and
passed through unchanged, so no symbol mapping is needed.
"""

import logging
import threading
import time
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any

from coinfolio.config import settings
from coinfolio.services.shared.http_client import HTTPClient, HTTPClientError

logger = logging.getLogger(__name__)

COINGECKO_PRO_URL = "https://pro-api.coingecko.com/api/v3"

PriceTable = dict[str, dict[str, Decimal]]


class OracleUnavailableError(Exception):
    """The price oracle could not be reached or returned an unusable response."""

    code = "OracleUnavailable"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _to_decimal(value: Any) -> Decimal | None:
    """Convert a JSON number to Decimal; anything else is treated as missing."""
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return None
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


class CoinGeckoClient(HTTPClient):
    """Client for fetching cryptocurrency prices and market data from CoinGecko.

    Spot prices from get_simple_price are cached in-process for a short
    window (price_cache_ttl_seconds); everything else is fetched live.

    Usage:
        client = CoinGeckoClient()
        prices = client.get_simple_price({"bitcoin", "ethereum"}, {"usd"})
        prices["bitcoin"]["usd"]  # Decimal("50000")
    """

    def __init__(
        self,
        api_key: str | None = None,
        use_pro_api: bool | None = None,
        timeout: float | None = None,
        cache_ttl: float | None = None,
    ):
        """Initialize CoinGecko client.

        Args:
            api_key: Optional API key for higher rate limits
            use_pro_api: Use Pro API endpoint (requires paid plan)
            timeout: Transport timeout in seconds
            cache_ttl: Seconds a spot price response stays fresh (0 disables caching)
        """
        self.api_key = api_key if api_key is not None else settings.coingecko_api_key
        self.use_pro_api = settings.coingecko_use_pro_api if use_pro_api is None else use_pro_api
        base_url = COINGECKO_PRO_URL if self.use_pro_api else settings.coingecko_base_url
        super().__init__(
            base_url=base_url,
            timeout=timeout if timeout is not None else settings.oracle_timeout_seconds,
            max_retries=settings.oracle_max_retries,
            headers=self._get_headers(),
        )
        self.cache_ttl = cache_ttl if cache_ttl is not None else settings.price_cache_ttl_seconds
        self._price_cache: dict[tuple[tuple[str, ...], tuple[str, ...]], tuple[float, PriceTable]] = {}
        self._cache_lock = threading.Lock()

    def _get_headers(self) -> dict[str, str]:
        """Get request headers including API key if available."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            if self.use_pro_api:
                headers["x-cg-pro-api-key"] = self.api_key
            else:
                headers["x-cg-demo-api-key"] = self.api_key
        return headers

    def _fetch(self, endpoint: str, params: dict | None = None) -> Any:
        """GET an endpoint and return parsed JSON.

        Raises:
            OracleUnavailableError: On any transport, status or decoding error
        """
        try:
            return self.get_json(endpoint, params=params)
        except HTTPClientError as e:
            if e.status_code == 429:
                logger.error("CoinGecko rate limit exceeded")
                raise OracleUnavailableError("Rate limit exceeded", status_code=429) from e
            logger.error(f"CoinGecko request failed for {endpoint}: {e}")
            raise OracleUnavailableError(str(e), status_code=e.status_code) from e
        except ValueError as e:
            logger.error(f"CoinGecko returned invalid JSON for {endpoint}: {e}")
            raise OracleUnavailableError("Invalid response from price oracle") from e

    def get_simple_price(
        self, asset_ids: Iterable[str], quote_currencies: Iterable[str]
    ) -> PriceTable:
        """Get spot prices for several coins in several quote currencies.

        Args:
            asset_ids: CoinGecko coin ids (e.g. {"bitcoin", "ethereum"})
            quote_currencies: Currency codes, case-insensitive (e.g. {"USD"})

        Returns:
            Mapping coin id -> currency (lower-case) -> price. Coins or
            currencies the oracle does not know are absent, never zero.

        Raises:
            ValueError: If either input is empty
            OracleUnavailableError: If the oracle cannot be queried
        """
        ids = tuple(sorted({a.strip() for a in asset_ids if a and a.strip()}))
        currencies = tuple(sorted({c.strip().lower() for c in quote_currencies if c and c.strip()}))
        if not ids:
            raise ValueError("asset_ids must not be empty")
        if not currencies:
            raise ValueError("quote_currencies must not be empty")

        cache_key = (ids, currencies)
        cached = self._cached_prices(cache_key)
        if cached is not None:
            return cached

        result = self._fetch(
            "/simple/price",
            {
                "ids": ",".join(ids),
                "vs_currencies": ",".join(currencies),
                "include_last_updated_at": "true",
            },
        )
        if not isinstance(result, dict):
            raise OracleUnavailableError("Unexpected price response shape")

        prices: PriceTable = {}
        for coin_id in ids:
            data = result.get(coin_id)
            if not isinstance(data, dict):
                continue
            quotes = {}
            for currency in currencies:
                price = _to_decimal(data.get(currency))
                if price is not None:
                    quotes[currency] = price
            if quotes:
                prices[coin_id] = quotes

        logger.info(f"Fetched prices for {len(prices)}/{len(ids)} coins in {','.join(currencies)}")
        self._store_prices(cache_key, prices)
        return prices

    def get_current_prices(self, asset_ids: Iterable[str], quote_currency: str) -> dict[str, Decimal]:
        """Get spot prices for several coins in a single quote currency.

        Returns:
            Mapping coin id -> price; unknown coins are absent
        """
        currency = quote_currency.strip().lower()
        table = self.get_simple_price(asset_ids, [currency])
        return {coin_id: quotes[currency] for coin_id, quotes in table.items() if currency in quotes}

    def _cached_prices(self, key) -> PriceTable | None:
        if self.cache_ttl <= 0:
            return None
        with self._cache_lock:
            entry = self._price_cache.get(key)
            if entry is None:
                return None
            expires_at, prices = entry
            if expires_at < time.monotonic():
                del self._price_cache[key]
                return None
            return {coin_id: dict(quotes) for coin_id, quotes in prices.items()}

    def _store_prices(self, key, prices: PriceTable) -> None:
        if self.cache_ttl <= 0:
            return
        with self._cache_lock:
            self._price_cache[key] = (time.monotonic() + self.cache_ttl, prices)

    def clear_cache(self) -> None:
        """Drop every cached spot price."""
        with self._cache_lock:
            self._price_cache.clear()

    def get_markets(
        self,
        vs_currency: str = "usd",
        per_page: int = 100,
        page: int = 1,
        order: str = "market_cap_desc",
    ) -> list[dict]:
        """Get a page of coins with market data (price, market cap, volume, 24h change)."""
        return self._fetch(
            "/coins/markets",
            {
                "vs_currency": vs_currency.lower(),
                "per_page": per_page,
                "page": page,
                "order": order,
                "sparkline": "false",
            },
        )

    def get_coin(self, coin_id: str) -> dict:
        """Get coin details including market data in every supported currency."""
        return self._fetch(
            f"/coins/{coin_id}",
            {
                "localization": "false",
                "tickers": "false",
                "market_data": "true",
                "community_data": "false",
                "developer_data": "false",
                "sparkline": "false",
            },
        )

    def search(self, query: str) -> dict:
        """Search coins by name or symbol."""
        return self._fetch("/search", {"query": query})

    def get_trending(self) -> dict:
        """Get the coins trending on CoinGecko in the last 24 hours."""
        return self._fetch("/search/trending")

    def get_supported_currencies(self) -> list[str]:
        """Get the quote currencies CoinGecko can price in."""
        return self._fetch("/simple/supported_vs_currencies")
