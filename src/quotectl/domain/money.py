"""Decimal money helpers.

Amounts are ``Decimal`` end to end. Intermediate sums keep full precision;
:func:`round_money` is applied only where a value is presented (document
totals, VAT breakdown, rendered tables).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal(0)
ONE = Decimal(1)
HUNDRED = Decimal(100)
CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Coerce *value* to a finite ``Decimal``.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.

    Raises:
        ValueError: If *value* is not numeric or not finite.
    """
    if isinstance(value, bool):
        msg = f"Not a number: {value!r}"
        raise ValueError(msg)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip().replace(",", "."))
        except InvalidOperation as exc:
            msg = f"Not a number: {value!r}"
            raise ValueError(msg) from exc
    else:
        msg = f"Not a number: {value!r}"
        raise ValueError(msg)
    if not result.is_finite():
        msg = f"Not a finite number: {value!r}"
        raise ValueError(msg)
    return result


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, rate: Decimal) -> Decimal:
    """``amount * rate / 100`` at full precision."""
    return amount * rate / HUNDRED


def with_rate(amount: Decimal, rate: Decimal) -> Decimal:
    """``amount * (1 + rate / 100)`` at full precision."""
    return amount * (ONE + rate / HUNDRED)


def format_number(value: Decimal) -> str:
    """Plain string for a decimal without exponent or trailing zeros.

    Examples:
        >>> format_number(Decimal("10.00"))
        '10'
        >>> format_number(Decimal("12.50"))
        '12.5'
    """
    normalized = value.normalize()
    if normalized == 0:
        return "0"
    return format(normalized, "f")
