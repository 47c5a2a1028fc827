"""Portfolio domain exceptions.

Each carries a stable ``code`` that the API layer renders as the ``error``
field of the response body.
"""


class PortfolioError(Exception):
    """Base exception for ledger and workflow errors."""

    code = "PortfolioError"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class LedgerValidationError(PortfolioError):
    """Malformed input: non-positive amount, blank asset, same-asset swap."""

    code = "ValidationError"


class InsufficientBalanceError(PortfolioError):
    """The owner does not hold enough of the source asset."""

    code = "InsufficientBalance"

    def __init__(self, asset_id: str, requested=None, available=None, action: str = "swap"):
        self.asset_id = asset_id
        self.requested = requested
        self.available = available
        if available is None:
            message = f"You do not hold {asset_id}"
        else:
            message = f"You cannot {action} more than you hold ({available} {asset_id} available)"
        super().__init__(message)


class PriceUnavailableError(PortfolioError):
    """A price needed for the operation could not be obtained."""

    code = "PriceUnavailable"
