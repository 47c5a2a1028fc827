"""Synchronous HTTP base client for the upstream market-data API.

Subclasses get a lazily created httpx.Client, tenacity back-off for
transient failures and a single exception type for everything else.
"""

import logging
import threading
from typing import Any, Self

import httpx
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from coinfolio import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"coinfolio/{__version__}"

# Upstream gateway hiccups; anything else is the caller's problem
RETRYABLE_STATUS_CODES = frozenset({502, 503, 504})


class HTTPClientError(Exception):
    """Request failed after retries. status_code is None for transport errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


def is_transient(error: BaseException) -> bool:
    """Whether a failed attempt is worth repeating."""
    if isinstance(error, (httpx.TimeoutException, httpx.ConnectError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return False


class HTTPClient:
    """Base client: timeouts, retries and error mapping.

    Timeouts, connection failures and 502/503/504 responses are retried
    with exponential back-off, max_retries attempts in total. Other status
    errors fail on the first attempt.

    Example:
        class PriceFeed(HTTPClient):
            def __init__(self):
                super().__init__(base_url="https://api.coingecko.com/api/v3", timeout=5.0)

            def ping(self) -> dict:
                return self.get_json("/ping")
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        headers: dict[str, str] | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.default_headers = {"User-Agent": USER_AGENT, **(headers or {})}
        self._client: httpx.Client | None = None
        self._client_lock = threading.Lock()

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = httpx.Client(
                        base_url=self.base_url or "",
                        timeout=self.timeout,
                        headers=self.default_headers,
                    )
        return self._client

    def close(self) -> None:
        with self._client_lock:
            client, self._client = self._client, None
        if client is not None:
            client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _attempt(self, method: str, url: str, params: dict | None, headers: dict | None) -> httpx.Response:
        response = self.client.request(method=method, url=url, params=params, headers=headers)
        response.raise_for_status()
        return response

    def _request(
        self,
        method: str,
        url: str,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Args:
            method: HTTP method
            url: Path relative to base_url, or an absolute URL
            params: Query parameters
            headers: Extra headers for this request only

        Raises:
            HTTPClientError: Once retries are exhausted or on a non-retryable status
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            retry=retry_if_exception(is_transient),
            reraise=True,
        )
        try:
            return retrying(self._attempt, method, url, params, headers)
        except httpx.HTTPStatusError as e:
            response = e.response
            logger.warning(f"{method} {url} -> HTTP {response.status_code}: {response.text[:200]}")
            raise HTTPClientError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
                response_body=response.text,
            ) from e
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {url} timed out after {self.max_retries} attempt(s)")
            raise HTTPClientError(f"Request timed out: {url}") from e
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise HTTPClientError(f"Connection failed: {url}") from e

    def get_json(self, url: str, params: dict | None = None) -> Any:
        """GET and decode the JSON body. A body that is not JSON raises ValueError."""
        return self._request("GET", url, params=params).json()
