"""Fixed-point money helpers.

Amounts are persisted as integer minor units (millimes are not used; one unit
is 0.01 DT) so that sums over the ledger are exact.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean.exceptions import ValidationError

CURRENCY = "DT"
_CENT = Decimal("0.01")
# Keeps cents within a 64-bit integer column
_MAX_INTEGER_DIGITS = 15


def to_cents(amount, field: str = "amount", allow_zero: bool = False) -> int:
    """Convert a decimal amount (str, int, float or Decimal) to integer cents.

    Rejects amounts with more than two fractional digits and non-positive
    amounts (zero is accepted only when ``allow_zero`` is set).
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError({field: [f"'{amount}' is not a valid amount"]}) from None

    if not value.is_finite():
        raise ValidationError({field: [f"'{amount}' is not a valid amount"]})
    if value.adjusted() >= _MAX_INTEGER_DIGITS:
        raise ValidationError({field: [f"Amount may have at most {_MAX_INTEGER_DIGITS} integer digits"]})
    try:
        exact = value == value.quantize(_CENT)
    except InvalidOperation:
        raise ValidationError({field: [f"'{amount}' is not a valid amount"]}) from None
    if not exact:
        raise ValidationError({field: ["Amount may have at most 2 decimal places"]})
    if value < 0 or (value == 0 and not allow_zero):
        raise ValidationError({field: ["Amount must be greater than zero"]})

    return int((value * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_cents(cents: int | None) -> Decimal:
    """Convert integer cents back to a two-digit Decimal."""
    return (Decimal(cents or 0) / 100).quantize(_CENT, rounding=ROUND_HALF_UP)


def rate_to_cents(rate: str) -> int:
    """Parse a configured per-order rate such as ``"7.00"``."""
    return to_cents(rate, field="rate", allow_zero=True)
