"""Building blocks shared by outbound clients."""

from .http_client import HTTPClient, HTTPClientError, is_transient

__all__ = ["HTTPClient", "HTTPClientError", "is_transient"]
