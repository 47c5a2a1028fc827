"""Decimal helpers shared by the ledger, swap and log services."""

from decimal import Decimal, InvalidOperation, localcontext

from coinfolio.constants import PRICE_QUANTUM, QUANTITY_QUANTUM
from coinfolio.services.portfolio.exceptions import LedgerValidationError

WORKING_PRECISION = 50


def to_decimal(value, field_name: str) -> Decimal:
    """Coerce value to a finite Decimal.

    Raises:
        LedgerValidationError: value is not a number, NaN or infinite
    """
    if isinstance(value, bool):
        raise LedgerValidationError(f"{field_name} must be a number")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise LedgerValidationError(f"{field_name} must be a number") from e
    if not result.is_finite():
        raise LedgerValidationError(f"{field_name} must be a finite number")
    return result


def positive_amount(value, field_name: str = "amount") -> Decimal:
    """Coerce value to a Decimal strictly greater than zero."""
    result = to_decimal(value, field_name)
    if result <= 0:
        raise LedgerValidationError(f"{field_name} must be a positive number")
    return result


def non_negative_price(value, field_name: str = "price") -> Decimal | None:
    """Coerce an optional price; None passes through, negatives are rejected."""
    if value is None:
        return None
    result = to_decimal(value, field_name)
    if result < 0:
        raise LedgerValidationError(f"{field_name} must be zero or greater")
    return result


def quantize_quantity(value: Decimal | None) -> Decimal | None:
    """Round a quantity to storage precision (18 dp)."""
    if value is None:
        return None
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        return Decimal(value).quantize(QUANTITY_QUANTUM)


def quantize_price(value: Decimal | None) -> Decimal | None:
    """Round a price or value to storage precision (10 dp)."""
    if value is None:
        return None
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        return Decimal(value).quantize(PRICE_QUANTUM)


def stored_quantity(value, field_name: str = "quantity") -> Decimal:
    """Coerce value to a positive quantity at storage precision.

    Rounding happens before the sign check, so a value below the 18 dp
    quantum is rejected instead of being persisted as zero.
    """
    result = quantize_quantity(to_decimal(value, field_name))
    if result <= 0:
        raise LedgerValidationError(f"{field_name} must be a positive number of at least {QUANTITY_QUANTUM}")
    return result
