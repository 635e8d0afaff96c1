from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal(100)


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Coerce ``value`` to a cent-quantized Decimal.

    Floats go through ``str`` first so 0.1 stays 0.10 rather than its binary
    expansion.
    """
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"not a monetary amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"not a monetary amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_percentage(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    try:
        pct = Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"not a percentage: {value!r}") from exc
    if not pct.is_finite():
        raise ValueError(f"not a percentage: {value!r}")
    return pct


def percent_of(amount: Decimal, percentage: Decimal) -> Decimal:
    return (amount * percentage / HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)
