"""Price oracle dependency.

One CoinGecko client per process so its connection pool and spot-price
cache are shared by every request. Tests override get_price_oracle.
"""

import logging
import threading

from coinfolio.services.coingecko_client import CoinGeckoClient

logger = logging.getLogger(__name__)

_oracle: CoinGeckoClient | None = None
_oracle_lock = threading.Lock()


def get_price_oracle() -> CoinGeckoClient:
    """Return the shared CoinGecko client, creating it on first use."""
    global _oracle
    if _oracle is None:
        # Sync routes run in the threadpool; only one thread may build the client
        with _oracle_lock:
            if _oracle is None:
                _oracle = CoinGeckoClient()
                logger.info(f"Price oracle client created for {_oracle.base_url}")
    return _oracle


def close_price_oracle() -> None:
    """Close the shared client. Called from the application shutdown hook."""
    global _oracle
    with _oracle_lock:
        oracle, _oracle = _oracle, None
    if oracle is not None:
        oracle.close()
        logger.info("Price oracle client closed")
