"""
Money Helpers

All balances and amounts are Decimal values rounded to two places.
NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Union

from .errors import ValidationError

# Set global decimal context for financial precision
getcontext().prec = 28

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')

AmountLike = Union[Decimal, int, float, str]


def to_amount(value: AmountLike) -> Decimal:
    """Convert a value to a Decimal rounded to cents"""
    if not isinstance(value, Decimal):
        try:
            # str() first so floats keep their printed value, not their binary one
            value = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"Invalid amount: {value!r}")
    if not value.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    try:
        return value.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the context precision can hold at two places
        raise ValidationError(f"Invalid amount: {value!r}")


def require_positive(value: AmountLike, what: str = "Amount") -> Decimal:
    """Return the rounded amount, raising if it is not greater than zero"""
    amount = to_amount(value)
    if amount <= ZERO:
        raise ValidationError(f"{what} must be greater than zero")
    return amount


def format_amount(amount: Decimal) -> str:
    """Plain string form used in ledger notes and notification messages"""
    return f"{to_amount(amount):f}"
