"""
Money helpers.

Every monetary quantity is a Decimal with exactly two places, rounded
half-up. Floats are converted through ``str`` so binary noise never leaks
into a balance.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from banksim.domain.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Numeric = Union[Decimal, int, float, str]


def money(value: Numeric) -> Decimal:
    """Quantize to 2 dp, ROUND_HALF_UP."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(value) -> Decimal:
    """
    Parse a caller-supplied amount.

    Raises:
        ValidationError: None, non-numeric, NaN or infinite input
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("Invalid amount.")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid amount.")
    if not amount.is_finite():
        raise ValidationError("Invalid amount.")
    return money(amount)


def require_positive(value) -> Decimal:
    """Parse an amount and require it to be strictly positive."""
    amount = parse_amount(value)
    if amount <= ZERO:
        raise ValidationError("Invalid amount.")
    return amount
