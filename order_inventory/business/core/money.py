"""
Two-decimal fixed-point amounts
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Coerce int/str/float/Decimal to a Decimal rounded to cents."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        # Go through str so 0.1 stays 0.10 rather than 0.1000000000000000055...
        value = repr(value)
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e
